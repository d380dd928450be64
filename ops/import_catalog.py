from __future__ import annotations

import argparse
from pathlib import Path

from mclaim import create_app
from mclaim.services.catalog import import_catalog


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import INA-CBG reference templates from a CSV/TSV file.")
    parser.add_argument("path", type=Path, help="File katalog (pemisah ; , tab atau |).")
    parser.add_argument(
        "--mode",
        choices=["merge", "replace"],
        default="merge",
        help="merge: perbarui/tambah kode; replace: ganti seluruh katalog.",
    )
    parser.add_argument("--env", default=None, help="Nama konfigurasi (development/production).")
    parser.add_argument("--encoding", default="utf-8-sig", help="Encoding file input.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    text = args.path.read_text(encoding=args.encoding)

    app = create_app(args.env)
    with app.app_context():
        result = import_catalog(text, args.mode)

    print(
        f"Import selesai ({result['mode']}). {result['imported']} kode diimpor, "
        f"{result['skipped']} baris dilewati, total katalog {result['total']} kode."
    )


if __name__ == "__main__":
    main()
