"""
Synthetic Olist Dataset Generator
Writes an Olist-shaped CSV export for local runs of the report.
"""

import argparse
from pathlib import Path

from olist_analytics.config.logging import configure_logging
from olist_analytics.data.generators import OlistDataGenerator
from olist_analytics.data.schema import TABLES

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "raw"


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic Olist dataset")
    parser.add_argument("--orders", type=int, default=5000, help="Number of orders (default: 5000)")
    parser.add_argument("--products", type=int, default=600, help="Number of products (default: 600)")
    parser.add_argument("--sellers", type=int, default=150, help="Number of sellers (default: 150)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--output", default=str(OUTPUT_DIR), help=f"Output directory (default: {OUTPUT_DIR})")
    args = parser.parse_args()

    configure_logging()

    print("=" * 60)
    print("Synthetic Olist Dataset Generator")
    print("=" * 60 + "\n")

    generator = OlistDataGenerator(seed=args.seed)
    dataset = generator.generate(
        n_orders=args.orders,
        n_products=args.products,
        n_sellers=args.sellers,
    )
    generator.write_csv(dataset, args.output)

    print(f"\nOutput: {args.output}\n")
    for entity, df in dataset.items():
        path = Path(args.output) / TABLES[entity].file_name
        if path.exists():
            size = path.stat().st_size / 1024 / 1024
            print(f"   {path.name}: {df.height:,} rows ({size:.2f} MB)")


if __name__ == "__main__":
    main()
