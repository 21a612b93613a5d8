#!/usr/bin/env python3
"""
Submit a product from a YAML file.

Drives the product wizard through all four steps with the values from the
file, then submits (uploading any local images first).

Usage:
    python3 scripts/submit_product.py product.yaml \\
        [--token xxx]          # or set STOREFRONT_ACCESS_TOKEN env var
        [--store ~/.storefront/store.json]

Product file:
    name: Steel Bottle
    price: "250.00"
    mrp: "300.00"
    total_stock: 10
    online_stock: 4
    sale_type: BOTH
    category: 3
    attributes: {Material: Steel}
    main_image: photos/bottle.jpg
    sub_images: [photos/side.jpg]
    existing: {...}            # optional backend record -> edit mode

Exit codes:
    0 = product saved
    1 = validation, upload or server failure
"""

import argparse
import os
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from storefront.api import ACCESS_TOKEN_KEY, JsonFileStore, MemoryStore, StorefrontAPIClient
from storefront.common import (
    StorefrontError,
    describe_error,
    load_api_settings,
    load_media_host_config,
    setup_logging,
)
from storefront.media import MediaUploader
from storefront.models import LocalMediaFile
from storefront.submission import SubmissionStrategySelector
from storefront.wizard import STEP_TITLES, ProductWizard

load_dotenv()


def fill_wizard(wizard: ProductWizard, data: dict, base_dir: Path) -> bool:
    """Enter the file's values step by step. Returns False if a step is blocked."""
    for field_name in ("name", "model_name", "description"):
        if field_name in data:
            wizard.set_text(field_name, str(data[field_name]))
    for field_name in ("price", "mrp"):
        if field_name in data and not wizard.set_price_input(field_name, str(data[field_name])):
            print(f"ERROR: invalid {field_name}: {data[field_name]!r}")
            return False
    if not wizard.advance():
        return False

    # total first so online stock is clamped against the new total
    for field_name in ("total_stock", "online_stock"):
        if field_name in data:
            wizard.set_stock_input(field_name, data[field_name])
    if "sale_type" in data:
        wizard.apply_partial_update(sale_type=data["sale_type"])
    if not wizard.advance():
        return False

    if "category" in data:
        wizard.select_category(int(data["category"]))
    for name, value in (data.get("attributes") or {}).items():
        if not wizard.set_attribute(name, str(value)):
            print(f"WARNING: attribute {name}={value!r} rejected")
    if not wizard.advance():
        return False

    if data.get("main_image"):
        wizard.set_main_image(LocalMediaFile(base_dir / data["main_image"]))
    for path in data.get("sub_images") or []:
        if not wizard.add_sub_image(LocalMediaFile(base_dir / path)):
            print(f"WARNING: {wizard.last_message}")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or update a product from a YAML file")
    parser.add_argument("product_file", help="Path to product YAML")
    parser.add_argument(
        "--token",
        help="Bearer token (default: STOREFRONT_ACCESS_TOKEN env var, then --store)",
    )
    parser.add_argument(
        "--store",
        default=str(Path.home() / ".storefront" / "store.json"),
        help="JSON key-value store holding the saved access token",
    )
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--quiet", action="store_true")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose, quiet=args.quiet)

    product_path = Path(args.product_file)
    if not product_path.exists():
        print(f"ERROR: Product file not found: {product_path}")
        sys.exit(1)
    with open(product_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    token = args.token or os.environ.get("STOREFRONT_ACCESS_TOKEN")
    store = MemoryStore({ACCESS_TOKEN_KEY: token}) if token else JsonFileStore(args.store)

    api_client = StorefrontAPIClient(load_api_settings(), store)
    uploader = MediaUploader(load_media_host_config())
    selector = SubmissionStrategySelector(uploader, api_client)

    try:
        wizard = ProductWizard(selector, existing_product=data.get("existing"))
        if data.get("category") is not None:
            wizard.set_categories(api_client.list_categories())

        if not fill_wizard(wizard, data, product_path.parent):
            print(f"ERROR: Cannot continue past step {wizard.step} "
                  f"({STEP_TITLES[wizard.step]}). Check the product file.")
            sys.exit(1)

        outcome = wizard.submit()
    except StorefrontError as e:
        print(f"ERROR: {describe_error(e)}")
        sys.exit(1)
    finally:
        uploader.close()
        api_client.close()

    if not outcome.success:
        print(f"ERROR: {outcome.message}")
        for field_name, message in outcome.errors.items():
            print(f"  {field_name}: {message}")
        sys.exit(1)

    product = outcome.product or {}
    print(f"{outcome.message} (id: {product.get('id', '?')})")


if __name__ == "__main__":
    main()
