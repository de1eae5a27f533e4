"""
Example: describe a table and a query, then load rows into records.

Run with: DATABASE_DSN=user:pass@localhost:3306/shop MATERIALIZE_DSN=... python examples/describe_orders.py
"""

from dbstruct import DBStruct
from dbstruct.core.logging_config import setup_logging


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def main():
    setup_logging()

    dbs = DBStruct.from_settings(
        name_mapper=snake_to_camel,
        tagger=lambda table, column: {"db": column},
    )

    orders = dbs.describe("orders")
    for field in orders.fields:
        print(f"{field.name:<20} {field.source_type:<16} {field.resolved_type().annotation}")

    summary = dbs.describe_query(
        "SELECT customer, SUM(total) AS spent FROM orders GROUP BY customer"
    )
    records = dbs.select(
        summary, "SELECT customer, SUM(total) AS spent FROM orders GROUP BY customer"
    )
    print(records.to_dataframe())


if __name__ == "__main__":
    main()
