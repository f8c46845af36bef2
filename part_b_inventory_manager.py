#!/usr/bin/env python3
"""
part_b_inventory_manager.py

In-memory inventory and shopping-cart manager.

Products carry an arbitrary-precision `Decimal` price and an integer stock.
Selling moves units from a product's stock into a cart line; returning a cart
line puts the units back. Cart totals are computed with Decimal arithmetic,
never floats.

Typical usage:
    python part_b_inventory_manager.py --charts inventory_outputs
"""
from __future__ import annotations
import argparse
import logging
import math
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from cli_helpers import input_prompt, prompt_int, read_choice
from keyed_store import ErrorKind, HoldingPolicy, KeyedCollectionStore, Ledger, Result

# Configuration
DEFAULT_CART_ID = "cart"
DEFAULT_CHART_DIR = "inventory_outputs"

# Logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("Inventory")


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: Decimal
    stock: int


@dataclass(frozen=True)
class CartItem:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class Cart:
    id: str
    items: Tuple[CartItem, ...] = ()


@dataclass(frozen=True)
class CartLine:
    product_id: int
    name: str
    quantity: int
    cost: Decimal


@dataclass(frozen=True)
class CartSummary:
    lines: Tuple[CartLine, ...]
    total: Decimal

    @property
    def item_count(self) -> int:
        return len(self.lines)


class CartSales(HoldingPolicy):
    """Units leave stock and accumulate in one cart line per product."""

    def holdings(self, holder: Cart) -> Sequence[CartItem]:
        return holder.items

    def with_holdings(self, holder: Cart, holdings: Sequence[CartItem]) -> Cart:
        return replace(holder, items=tuple(holdings))

    def entry_key(self, entry: CartItem) -> int:
        return entry.product_id

    def can_take(self, item: Product, quantity: int) -> bool:
        return item.stock >= quantity

    def take(self, item: Product, quantity: int) -> Tuple[Product, CartItem]:
        return replace(item, stock=item.stock - quantity), CartItem(item.id, quantity)

    def release(self, item: Product, entry: CartItem) -> Product:
        return replace(item, stock=item.stock + entry.quantity)

    def merge(self, holdings: Sequence[CartItem], entry: CartItem) -> Tuple[CartItem, ...]:
        merged = []
        found = False
        for line in holdings:
            if not found and line.product_id == entry.product_id:
                merged.append(CartItem(line.product_id, line.quantity + entry.quantity))
                found = True
            else:
                merged.append(line)
        if not found:
            merged.append(entry)
        return tuple(merged)


PRODUCTS: KeyedCollectionStore[Product, int] = KeyedCollectionStore(lambda p: p.id, name="product")
CARTS: KeyedCollectionStore[Cart, str] = KeyedCollectionStore(lambda c: c.id, name="cart")
SALES = Ledger(PRODUCTS, CARTS, CartSales())


@dataclass
class InventoryState:
    """Inventory and carts carried from one menu iteration to the next."""
    inventory: List[Product] = field(default_factory=list)
    carts: List[Cart] = field(default_factory=lambda: [Cart(DEFAULT_CART_ID)])


# ---------------- Inventory ----------------
def add_product(inventory: Sequence[Product], name: str, price: Union[str, int, Decimal],
                stock: int) -> List[Product]:
    """
    Append a new product; its id is the inventory size plus one.

    Raises:
        decimal.InvalidOperation: if `price` is not a finite decimal number.
    """
    amount = Decimal(str(price))
    if not amount.is_finite():
        raise InvalidOperation(f"Price must be a finite number: {price!r}")
    product = Product(id=len(inventory) + 1, name=name, price=amount, stock=int(stock))
    logger.info("Added product %s (%s)", product.id, name)
    return PRODUCTS.add(inventory, product)


def list_products(inventory: Sequence[Product]) -> List[Product]:
    return list(inventory)


def increase_stock(inventory: Sequence[Product], product_id: int, quantity: int) -> Result[List[Product]]:
    """Add `quantity` units to a product's stock."""
    if quantity < 1:
        return Result.failure(ErrorKind.INVALID_QUANTITY, f"Quantity must be positive: {quantity}")
    product = PRODUCTS.find(inventory, product_id)
    if product is None:
        return Result.failure(ErrorKind.NOT_FOUND, f"Product not found: {product_id}")
    logger.info("Stock of %s raised by %d", product_id, quantity)
    return Result.success(PRODUCTS.replace(inventory, product_id, replace(product, stock=product.stock + quantity)))


def sell_product(inventory: Sequence[Product], carts: Sequence[Cart], cart_id: str, product_id: int,
                 quantity: int) -> Result[Tuple[List[Product], List[Cart]]]:
    """
    Take `quantity` units out of stock and put them in the cart.

    Fails with HOLDER_NOT_FOUND for an unknown cart, INVALID_QUANTITY for
    non-positive quantities and ITEM_UNAVAILABLE when the product is missing
    or its stock is too low. The inventory is unchanged on failure.
    """
    res = SALES.transfer(inventory, carts, cart_id, product_id, quantity)
    if res.ok:
        logger.info("Sold %d of product %s to %s", quantity, product_id, cart_id)
    else:
        logger.warning(res.message)
    return res


def return_to_stock(inventory: Sequence[Product], carts: Sequence[Cart], cart_id: str,
                    product_id: int) -> Result[Tuple[List[Product], List[Cart]]]:
    """Remove a product's line from the cart and restore its units to stock."""
    res = SALES.revert(inventory, carts, cart_id, product_id)
    if res.ok:
        logger.info("Product %s returned from %s", product_id, cart_id)
    else:
        logger.warning(res.message)
    return res


# ---------------- Cart ----------------
def view_cart(cart: Cart, inventory: Sequence[Product]) -> CartSummary:
    """
    Price every cart line against the current inventory.

    Lines whose product is no longer in the inventory are skipped.
    """
    lines = []
    total = Decimal(0)
    for item in cart.items:
        product = PRODUCTS.find(inventory, item.product_id)
        if product is None:
            logger.warning("Cart line for unknown product %s skipped", item.product_id)
            continue
        cost = product.price * Decimal(item.quantity)
        lines.append(CartLine(product.id, product.name, item.quantity, cost))
        total += cost
    return CartSummary(tuple(lines), total)


def checkout(inventory: Sequence[Product], carts: Sequence[Cart],
             cart_id: str) -> Result[Tuple[List[Cart], CartSummary]]:
    """
    Settle a cart: price it and empty it.

    Returns (carts', summary) where the cart `cart_id` has no items left.
    """
    cart = CARTS.find(carts, cart_id)
    if cart is None:
        return Result.failure(ErrorKind.HOLDER_NOT_FOUND, f"Cart not found: {cart_id}")
    summary = view_cart(cart, inventory)
    logger.info("Checkout of %s completed. Total items: %d", cart_id, len(cart.items))
    return Result.success((CARTS.replace(carts, cart_id, replace(cart, items=())), summary))


# ---------------- Reports ----------------
def inventory_frame(inventory: Sequence[Product]) -> pd.DataFrame:
    rows = [{"ID": p.id, "Name": p.name, "Price": p.price, "Stock": p.stock} for p in inventory]
    return pd.DataFrame(rows, columns=["ID", "Name", "Price", "Stock"])


def cart_frame(summary: CartSummary) -> pd.DataFrame:
    rows = [{"Product": line.name, "Quantity": line.quantity, "Cost": line.cost} for line in summary.lines]
    return pd.DataFrame(rows, columns=["Product", "Quantity", "Cost"])


def save_plot(fig, path: Path) -> None:
    """
    Save a matplotlib figure to disk ensuring the parent directory exists.

    Args:
        fig: matplotlib.figure.Figure instance.
        path: Path to the PNG file to write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches="tight")
    plt.close(fig)


def annotate_bar_values(ax, fmt="{:.0f}", fontsize=8, va="bottom"):
    """
    Add numeric labels on top of bar containers in an Axes.

    Bars with NaN or zero heights are skipped.
    """
    for p in ax.patches:
        height = p.get_height()
        if height is None or (isinstance(height, float) and math.isnan(height)):
            continue
        if abs(height) < 1e-12:
            continue
        x = p.get_x() + p.get_width() / 2
        ax.text(x, height, fmt.format(height), ha="center", va=va, fontsize=fontsize, rotation=0)


def save_stock_chart(inventory: Sequence[Product], out_dir: Union[str, Path] = DEFAULT_CHART_DIR) -> Optional[Path]:
    """
    Draw a bar chart of stock per product and write it to `out_dir/stock_levels.png`.

    Returns the written path, or None when the inventory is empty.
    """
    df = inventory_frame(inventory)
    if df.empty:
        logger.info("No products; stock chart skipped")
        return None
    fig, ax = plt.subplots(figsize=(10, 6))
    sns.barplot(data=df, x="Name", y="Stock", color="steelblue", ax=ax)
    ax.set_title("Stock Levels by Product")
    ax.set_ylabel("Units in stock")
    ax.set_xlabel("")
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right")
    annotate_bar_values(ax)
    path = Path(out_dir) / "stock_levels.png"
    save_plot(fig, path)
    logger.info("Saved stock chart to %s", path)
    return path


# ---------------- CLI ----------------
def print_menu():
    print("\n--- Inventory manager (CLI) ---")
    print("1. Add product")
    print("2. List products")
    print("3. Increase stock")
    print("4. Sell product")
    print("5. View cart")
    print("6. Checkout")
    print("7. Return item to stock")
    print("8. Save stock chart")
    print("0. Exit")


def cli_loop(state: InventoryState, chart_dir: str = DEFAULT_CHART_DIR) -> InventoryState:
    """
    Interactive command-loop for the inventory manager.

    Input that cannot be parsed only aborts the current command.
    """
    while True:
        print_menu()
        choice = read_choice("Choose (0-8): ")
        if choice is None or choice == "0":
            print("Thanks for using the inventory manager.")
            break
        elif choice == "1":
            name = input_prompt("Product name: ")
            price = input_prompt("Price: ")
            stock = prompt_int("Stock: ")
            if stock is None:
                continue
            try:
                state.inventory = add_product(state.inventory, name, price, stock)
            except InvalidOperation:
                print(f"Not a valid price: {price!r}")
        elif choice == "2":
            if state.inventory:
                print(inventory_frame(list_products(state.inventory)).to_string(index=False))
            else:
                print("No products.")
        elif choice == "3":
            product_id = prompt_int("Product ID: ")
            quantity = prompt_int("Quantity to add: ")
            if product_id is None or quantity is None:
                continue
            res = increase_stock(state.inventory, product_id, quantity)
            if res.ok:
                state.inventory = res.value
            else:
                print(f"Error: {res.message}")
        elif choice == "4":
            product_id = prompt_int("Product ID: ")
            quantity = prompt_int("Quantity to sell: ")
            if product_id is None or quantity is None:
                continue
            res = sell_product(state.inventory, state.carts, DEFAULT_CART_ID, product_id, quantity)
            if res.ok:
                state.inventory, state.carts = res.value
            else:
                print(f"Error: {res.message}")
        elif choice == "5":
            summary = view_cart(CARTS.find(state.carts, DEFAULT_CART_ID), state.inventory)
            for line in summary.lines:
                print(f"Product: {line.name} | Quantity: {line.quantity} | Cost: {line.cost}")
            print(f"Total Cost: {summary.total}")
        elif choice == "6":
            res = checkout(state.inventory, state.carts, DEFAULT_CART_ID)
            if res.ok:
                state.carts, summary = res.value
                print(f"Checkout completed. Total items: {summary.item_count} | Total: {summary.total}")
            else:
                print(f"Error: {res.message}")
        elif choice == "7":
            product_id = prompt_int("Product ID: ")
            if product_id is None:
                continue
            res = return_to_stock(state.inventory, state.carts, DEFAULT_CART_ID, product_id)
            if res.ok:
                state.inventory, state.carts = res.value
            else:
                print(f"Error: {res.message}")
        elif choice == "8":
            path = save_stock_chart(state.inventory, chart_dir)
            print(f"Saved chart to: {path.resolve()}" if path else "No products to chart.")
        else:
            print("Unknown choice. Try again.")
    return state


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Part B: Inventory and cart manager")
    parser.add_argument("--charts", default=DEFAULT_CHART_DIR, help="Output folder for the stock chart")
    args = parser.parse_args()

    cli_loop(InventoryState(), args.charts)
