import argparse
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


def run_import(paths):
    """Import one or more auction workbooks from disk into the database."""
    from bidprice.db import Base, SessionLocal, engine
    from bidprice.errors import ImportFileError
    from bidprice.services import import_file

    Base.metadata.create_all(bind=engine)
    failures = 0
    session = SessionLocal()
    try:
        for path in paths:
            path = Path(path)
            try:
                result = import_file(session, path.read_bytes(), filename=path.name)
            except (OSError, ImportFileError) as e:
                print(f"{path.name}: {e}")
                failures += 1
                continue
            print(f"{path.name}: {result.message}")
            if result.error:
                failures += 1
    finally:
        session.close()
    return failures


def run_export(out_dir, filters):
    """Write the master workbook for the stored listings matching ``filters``."""
    from bidprice.db import SessionLocal
    from bidprice.errors import ExportError, NothingToExport
    from bidprice.services import export_listings

    session = SessionLocal()
    try:
        filename, data, count = export_listings(session, filters=filters)
    except (NothingToExport, ExportError) as e:
        print(str(e))
        return 1
    finally:
        session.close()
    target = Path(out_dir) / filename
    target.write_bytes(data)
    print(f"Exported {count} items to {target}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Carsome bid price import/export")
    sub = parser.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="import auction workbooks")
    imp.add_argument("files", nargs="+")

    exp = sub.add_parser("export", help="export the master workbook")
    exp.add_argument("--out", default=".")
    exp.add_argument("--brand")
    exp.add_argument("--model")
    exp.add_argument("--import-date")
    exp.add_argument("--min-year", type=int)
    exp.add_argument("--max-year", type=int)
    exp.add_argument("--min-price", type=float)
    exp.add_argument("--max-price", type=float)
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()

    if args.command == "import":
        raise SystemExit(1 if run_import(args.files) else 0)

    filters = {
        "brand": args.brand,
        "model": args.model,
        "import_date": args.import_date,
        "min_year": args.min_year,
        "max_year": args.max_year,
        "min_price": args.min_price,
        "max_price": args.max_price,
    }
    raise SystemExit(run_export(args.out, filters))
