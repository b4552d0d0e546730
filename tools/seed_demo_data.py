from __future__ import annotations

import os

from storefront.admin.order_review import DEMO_ORDERS
from storefront.db import DATABASE_URL, make_engine
from storefront.gateway import SqlGateway

SAMPLE_PRODUCT = {
    "name": "Productivity Software X",
    "description": "Maximise your efficiency with this tool.\nLifetime licence.\nInstant delivery.",
    "price": 49.99,
    "category": "Software",
    "icon_name": "Code",
    "image_url": None,
}


def main() -> None:
    url = os.getenv("DATABASE_URL", DATABASE_URL)
    gw = SqlGateway(make_engine(url))
    gw.create_all()

    res = gw.select("products", {"name": SAMPLE_PRODUCT["name"]})
    if not res.ok:
        raise SystemExit(f"Could not reach {url}: {res.error}")
    if res.data:
        print(f"SKIP product  {SAMPLE_PRODUCT['name']}")
    else:
        ins = gw.insert("products", SAMPLE_PRODUCT)
        if not ins.ok:
            raise SystemExit(f"Could not insert product: {ins.error}")
        print(f"OK   product  {SAMPLE_PRODUCT['name']}  (id={ins.data['id']})")

    for order in DEMO_ORDERS:
        existing = gw.select("orders", {"order_id": order.order_id})
        if existing.data:
            print(f"SKIP order    {order.order_id}")
            continue
        row = order.model_dump(mode="json", exclude={"id"})
        ins = gw.insert("orders", row)
        if not ins.ok:
            raise SystemExit(f"Could not insert order {order.order_id}: {ins.error}")
        print(f"OK   order    {order.order_id}")

    print(f"\nDone. Demo data is in: {url}")


if __name__ == "__main__":
    main()
