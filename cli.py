import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from vedic_api.errors import ChartError
from vedic_api.services.orchestrators.chart_full import build_chart


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Compute a sidereal chart report as JSON.")
    parser.add_argument("date", help="birth date, e.g. 1990-01-15 or 01/15/1990")
    parser.add_argument("time", help="birth time, e.g. 12:00:00 or 7:22 AM")
    parser.add_argument("timezone", help="IANA zone, e.g. Asia/Kolkata")
    parser.add_argument("lat", type=float)
    parser.add_argument("lon", type=float)
    parser.add_argument("--house-system", default="P")
    parser.add_argument("--engine", choices=["SWIEPH", "MOSEPH"], default=None)
    parser.add_argument("-o", "--output", type=Path, default=None)
    args = parser.parse_args(argv)

    load_dotenv()
    try:
        report = build_chart(
            args.date, args.time, args.timezone, args.lat, args.lon,
            house_system=args.house_system, force_engine=args.engine,
        )
    except ChartError as exc:
        print(json.dumps(exc.to_payload(), indent=2), file=sys.stderr)
        return 1

    text = json.dumps(report, indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(text, encoding="utf-8")
        print(f"Wrote chart JSON → {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
