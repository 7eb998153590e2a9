#!/usr/bin/env python3
"""
Print the SQL of a saved report, or of a configuration stored in a JSON file.

    python scripts/render_report_sql.py --report-id 3
    python scripts/render_report_sql.py --file config.json --pretty
"""
import argparse
import json
import sys

from report_builder.builder import ReportConfiguration, deserialize, format_sql, synthesize
from report_builder.catalog.dao import ReportConfigurationDAO
from report_builder.core.config import get_settings
from report_builder.core.database import create_all_tables, create_db_engine, create_session_factory


def load_from_database(report_id):
    """Configuration stored for ``report_id``, or None when there is none."""
    engine = create_db_engine(get_settings().database_url)
    create_all_tables(engine)
    session = create_session_factory(engine)()
    try:
        record = ReportConfigurationDAO(session).get_by_report_id(report_id)
        return deserialize(record) if record else None
    finally:
        session.close()


def load_from_file(path):
    with open(path, "r", encoding="utf-8") as f:
        return ReportConfiguration.model_validate(json.load(f))


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--report-id", type=int, help="id of a saved report")
    source.add_argument("--file", help="JSON file holding a configuration (camelCase keys)")
    parser.add_argument("--pretty", action="store_true", help="reindent the SQL for reading")
    args = parser.parse_args(argv)

    if args.report_id is not None:
        configuration = load_from_database(args.report_id)
        if configuration is None:
            print(f"No configuration stored for report {args.report_id}", file=sys.stderr)
            return 1
    else:
        configuration = load_from_file(args.file)

    sql = synthesize(configuration)
    print(format_sql(sql) if args.pretty else sql)
    return 0


if __name__ == "__main__":
    sys.exit(main())
