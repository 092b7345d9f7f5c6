"""Write the guest directory to a spreadsheet.

Usage:
    DATABASE_URL=... python scripts/export_guests.py [output.xlsx]
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


def main() -> None:
    output = Path(sys.argv[1] if len(sys.argv) > 1 else "guests.xlsx")

    if not os.environ.get("DATABASE_URL"):
        print("ERROR: DATABASE_URL not set")
        sys.exit(1)

    from unifiedapi.config import load_settings
    from unifiedapi.domain.errors import InternalError
    from unifiedapi.infra.db import database_from_settings
    from unifiedapi.infra.repositories.guests_repository import GuestDirectoryStore
    from unifiedapi.services.rsvp_gate import RsvpGateService

    db = database_from_settings(load_settings())
    service = RsvpGateService(GuestDirectoryStore(db), expose_debug=True)
    try:
        guests = service.export_guests()
    except InternalError as e:
        print(f"ERROR: {e.message} {e.debug or ''}")
        sys.exit(1)
    finally:
        db.close()

    from unifiedapi.services.export_service import guests_to_xlsx

    output.write_bytes(guests_to_xlsx(guests))
    print(f"Wrote {len(guests)} guests to {output}")


if __name__ == "__main__":
    main()
