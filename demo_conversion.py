#!/usr/bin/env python3
"""
Demo: Convert a generated user dataset into every calico format.

Writes users.json, users.csv, users.yaml and users.md next to the script
and reads the parseable ones back to show they survive the round trip.
"""

from calico import CSVOptions, DataExporter, MarkdownOptions
from calico.examples import build_users, flatten_user


def main():
    users = build_users(count=5)
    flat = [flatten_user(u) for u in users]
    exporter = DataExporter()

    print("=" * 80)
    print("CALICO CONVERSION DEMO")
    print("=" * 80)

    outputs = {
        "users.json": exporter.export(users, "json"),
        "users.yaml": exporter.export(users, "yaml"),
        "users.csv": exporter.export(flat, "csv", options=CSVOptions(quote_all_strings=False)),
        "users.md": exporter.export(flat, "md", options=MarkdownOptions(title="Users")),
    }

    for filename, result in outputs.items():
        print(f"\n{filename} ({result.size} bytes):")
        print("-" * 80)
        print(result.data)
        with open(filename, "w", encoding="utf-8") as f:
            f.write(result.data)

    print("\n" + "=" * 80)
    print("ROUND TRIPS")
    print("=" * 80)
    print("json:", exporter.from_json(outputs["users.json"].data) == users)
    print("yaml:", exporter.from_yaml(outputs["users.yaml"].data) == users)
    back = exporter.from_csv(outputs["users.csv"].data)
    print("csv: ", len(back) == len(flat), "(values come back as strings)")


if __name__ == "__main__":
    main()
