# src/cli/__main__.py
import sys, json
from dataclasses import asdict
from pathlib import Path
from types import SimpleNamespace

from sqlmodel import Session, select

from src.server.db.session import engine, init_db
from src.server.models import Customer, Organization, PricingSettingsRecord, Product, User
from src.server.schemas.customer import CustomerIn
from src.server.schemas.product import ProductIn
from src.server.settings.config import settings as app_settings
from src.services.errors import InvalidInput
from src.services.pricing import price_line
from src.services.pricing_settings import DEFAULT_SETTINGS, DEFAULT_SETTINGS_DOCUMENT, parse_settings
from src.services.security import hash_password

USAGE = """Usage:
  python -m src.cli init-db
  python -m src.cli seed [seed_dir]
  python -m src.cli price <line.json>

Examples:
  python -m src.cli seed knowledge/seed
  python -m src.cli price line.json

line.json:
  {"product": {"costPerCase": 24.5, "casesPerPallet": 40}, "cases": 80,
   "customerType": "Food Bank", "distance": 100, "settings": {...optional}}
"""

SEED_DIR = "knowledge/seed"


def _load_json(p):
    try:
        return json.loads(Path(p).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"Error reading JSON '{p}': {e}", file=sys.stderr)
        sys.exit(2)


def cmd_init_db():
    init_db()
    print(f"Database ready: {app_settings.database_url}")


def cmd_seed(seed_dir: str):
    """Demo organization + admin user, default settings, sample customers and products."""
    init_db()
    seed = Path(seed_dir)
    org_data = _load_json(seed / "organization.json")
    customers = _load_json(seed / "customers.json")
    products = _load_json(seed / "products.json")

    admin = org_data["admin"]
    email = admin["email"].strip().lower()

    with Session(engine) as session:
        if session.exec(select(User).where(User.email == email)).first():
            print(f"[seed] {email} already exists, nothing to do")
            return

        org = Organization(name=org_data["name"])
        session.add(org)
        session.flush()

        session.add(User(
            organization_id=org.id,
            email=email,
            password_hash=hash_password(admin["password"], iterations=app_settings.password_iterations),
            name=admin["name"],
            role="admin",
        ))
        session.add(PricingSettingsRecord(organization_id=org.id, settings=dict(DEFAULT_SETTINGS_DOCUMENT)))

        for row in customers:
            data = CustomerIn.model_validate(row).model_dump(exclude_unset=True)
            session.add(Customer(organization_id=org.id, **data))

        for row in products:
            data = ProductIn.model_validate(row).model_dump(exclude_unset=True)
            session.add(Product(organization_id=org.id, **data))

        session.commit()

    print(f"[seed] {org_data['name']}: 1 user, {len(customers)} customers, {len(products)} products")


def cmd_price(line_path: str):
    line = _load_json(line_path)
    product = line.get("product") or {}

    try:
        pricing = parse_settings(line["settings"]) if line.get("settings") else DEFAULT_SETTINGS
        price = price_line(
            SimpleNamespace(
                cost_per_case=product.get("costPerCase"),
                cases_per_pallet=product.get("casesPerPallet"),
            ),
            line.get("cases"),
            line.get("customerType"),
            line.get("distance", 0),
            pricing,
            margin_percent=line.get("marginPercent"),
        )
    except InvalidInput as e:
        print(f"Invalid line: {e}", file=sys.stderr)
        sys.exit(2)

    print(json.dumps(asdict(price.rounded()), indent=2))


def main():
    if len(sys.argv) < 2:
        print(USAGE, file=sys.stderr); sys.exit(1)

    cmd = sys.argv[1].lower()

    if cmd == "init-db":
        cmd_init_db()
        return

    if cmd == "seed":
        cmd_seed(sys.argv[2] if len(sys.argv) > 2 else SEED_DIR)
        return

    if cmd == "price":
        if len(sys.argv) < 3:
            print(USAGE, file=sys.stderr); sys.exit(1)
        cmd_price(sys.argv[2])
        return

    print(USAGE, file=sys.stderr); sys.exit(1)


if __name__ == "__main__":
    main()
