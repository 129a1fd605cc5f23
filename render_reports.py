# render_reports.py
import argparse
import json
from pathlib import Path

from config import Config
from pdf_service import render_quote_report, render_work_order_report
from report_theme import THEMES


def _render_payload(payload: dict, theme: str, out_dir: str):
    if "quote" in payload:
        return "quote", render_quote_report(payload, theme=theme, reports_dir=out_dir)
    if "workOrder" in payload or "work_order" in payload:
        return "work order", render_work_order_report(payload, theme=theme, reports_dir=out_dir)
    raise ValueError("payload has neither a 'quote' nor a 'workOrder' object")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render quote / work order PDFs from JSON aggregate files.")
    parser.add_argument("payloads", nargs="+", help="JSON files, one aggregate each.")
    parser.add_argument("--theme", choices=sorted(THEMES), default=Config.REPORT_THEME, help="Visual variant.")
    parser.add_argument("--out", default=Config.REPORTS_DIR, help="Output directory for the PDFs.")
    args = parser.parse_args(argv)

    # Ensure output dir exists
    Path(args.out).mkdir(parents=True, exist_ok=True)

    total = len(args.payloads)
    generated = 0
    failed = 0

    for i, name in enumerate(args.payloads, start=1):
        try:
            payload = json.loads(Path(name).read_text(encoding="utf-8"))
            label, report = _render_payload(payload, args.theme, args.out)
            generated += 1
            note = f"  ({len(report.skipped_rows)} row(s) skipped)" if report.skipped_rows else ""
            print(f"[{i}/{total}] DONE  {label} {name} -> {report.file_path}{note}")

        except Exception as e:
            failed += 1
            print(f"[{i}/{total}] FAIL  {name}  ({e})")

    print("\n✅ PDF rendering complete.")
    print(f"Generated: {generated}")
    print(f"Failed:    {failed}")
    print(f"Output:    {args.out}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
