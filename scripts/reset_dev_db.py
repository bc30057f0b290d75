#!/usr/bin/env python3
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'backend'))


def main() -> int:
    parser = argparse.ArgumentParser(description='Drop and recreate every online assessment table.')
    parser.add_argument('--yes', action='store_true', help='Required to execute destructive reset.')
    args = parser.parse_args()

    if not args.yes:
        raise SystemExit('Refusing to reset database. Re-run with --yes to confirm destructive action.')

    from online_assessment.core.config import settings

    if settings.APP_ENV == 'production':
        raise SystemExit('Refusing to reset a production database.')

    from online_assessment.db.base import Base
    from online_assessment.db.session import SessionLocal, engine
    from online_assessment.services.bootstrap_service import ensure_reference_data

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        ensure_reference_data(db)
        db.commit()

    print('Development database reset completed.')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
