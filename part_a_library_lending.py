#!/usr/bin/env python3
"""
part_a_library_lending.py

In-memory library lending tracker.

Books and users live in two plain lists that are threaded through every call;
borrowing and returning move a copy of a book between the library and the
user's `borrowed_books`. All operations return new lists (wrapped in a
`Result` where the operation can be rejected) and never mutate their inputs.

Typical usage:
    python part_a_library_lending.py
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from cli_helpers import input_prompt, read_choice
from keyed_store import HoldingPolicy, KeyedCollectionStore, Ledger, Result

# Logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("Library")


@dataclass(frozen=True)
class Book:
    title: str = ""
    author: str = ""
    isbn: str = ""
    available: bool = True


@dataclass(frozen=True)
class User:
    name: str = ""
    id: str = ""
    borrowed_books: Tuple[Book, ...] = ()


class BookLending(HoldingPolicy):
    """A book is lent out whole: the flag flips and the user keeps a copy."""

    def holdings(self, holder: User) -> Sequence[Book]:
        return holder.borrowed_books

    def with_holdings(self, holder: User, holdings: Sequence[Book]) -> User:
        return replace(holder, borrowed_books=tuple(holdings))

    def entry_key(self, entry: Book) -> str:
        return entry.isbn

    def can_take(self, item: Book, quantity: int) -> bool:
        return item.available

    def take(self, item: Book, quantity: int) -> Tuple[Book, Book]:
        lent = replace(item, available=False)
        return lent, lent

    def release(self, item: Book, entry: Book) -> Book:
        return replace(item, available=True)


BOOKS: KeyedCollectionStore[Book, str] = KeyedCollectionStore(lambda b: b.isbn, name="book")
USERS: KeyedCollectionStore[User, str] = KeyedCollectionStore(lambda u: u.id, name="user")
LENDING = Ledger(BOOKS, USERS, BookLending())


@dataclass
class LibraryState:
    """Books and users carried from one menu iteration to the next."""
    books: List[Book] = field(default_factory=list)
    users: List[User] = field(default_factory=list)


# ---------------- Books & users ----------------
def add_book(library: Sequence[Book], book: Book) -> Result[List[Book]]:
    """
    Add a book to the library.

    Returns a failed Result (DUPLICATE_KEY) if the ISBN is already registered.
    """
    res = BOOKS.insert(library, book)
    if res.ok:
        logger.info("Added book %s", book.isbn)
    else:
        logger.warning(res.message)
    return res


def add_user(users: Sequence[User], user: User) -> Result[List[User]]:
    """
    Register a user.

    Returns a failed Result (DUPLICATE_KEY) if the user ID already exists.
    """
    res = USERS.insert(users, user)
    if res.ok:
        logger.info("Added user %s", user.id)
    else:
        logger.warning(res.message)
    return res


def remove_book(library: Sequence[Book], isbn: str) -> List[Book]:
    return BOOKS.remove(library, isbn)


def remove_user(users: Sequence[User], user_id: str) -> List[User]:
    return USERS.remove(users, user_id)


def list_books(library: Sequence[Book]) -> List[Book]:
    return list(library)


def list_users(users: Sequence[User]) -> List[User]:
    return list(users)


def find_book(library: Sequence[Book], isbn: str) -> Optional[Book]:
    return BOOKS.find(library, isbn)


def find_user(users: Sequence[User], user_id: str) -> Optional[User]:
    return USERS.find(users, user_id)


def available_books(library: Sequence[Book]) -> List[Book]:
    return [b for b in library if b.available]


def search_books(library: Sequence[Book], query: str) -> List[Book]:
    """
    Search books by title or author using a case-insensitive substring match.

    An empty query matches nothing.
    """
    q = (query or "").strip().lower()
    if q == "":
        return []
    return [b for b in library if q in b.title.lower() or q in b.author.lower()]


# ---------------- Lending ----------------
def borrow_book(library: Sequence[Book], users: Sequence[User], user_id: str,
                isbn: str) -> Result[Tuple[List[Book], List[User]]]:
    """
    Lend the book `isbn` to `user_id`.

    Fails with HOLDER_NOT_FOUND if the user is unknown and ITEM_UNAVAILABLE if
    the book is missing or already lent. On success the Result value is the
    pair (library', users').
    """
    res = LENDING.transfer(library, users, user_id, isbn)
    if res.ok:
        logger.info("Borrowed %s to %s", isbn, user_id)
    else:
        logger.warning(res.message)
    return res


def return_book(library: Sequence[Book], users: Sequence[User], user_id: str,
                isbn: str) -> Result[Tuple[List[Book], List[User]]]:
    """
    Process a book return from a user.

    Fails with HOLDER_NOT_FOUND if the user is unknown and ITEM_NOT_HELD if the
    user does not have the book.
    """
    res = LENDING.revert(library, users, user_id, isbn)
    if res.ok:
        logger.info("Book %s returned by %s", isbn, user_id)
    else:
        logger.warning(res.message)
    return res


def books_borrowed_by_user(users: Sequence[User], user_id: str) -> List[Book]:
    """Books currently held by `user_id`; an unknown user holds nothing."""
    user = USERS.find(users, user_id)
    return list(user.borrowed_books) if user else []


def lending_violations(library: Sequence[Book], users: Sequence[User]) -> List[str]:
    """
    ISBNs whose availability flag disagrees with who holds them.

    A book must be unavailable exactly when one user holds it. Held ISBNs that
    are no longer in the library are reported too.
    """
    holders: Dict[str, int] = {}
    for u in users:
        for b in u.borrowed_books:
            holders[b.isbn] = holders.get(b.isbn, 0) + 1

    bad = []
    for b in library:
        count = holders.pop(b.isbn, 0)
        if b.available and count != 0:
            bad.append(b.isbn)
        elif not b.available and count != 1:
            bad.append(b.isbn)
    bad.extend(holders.keys())
    return bad


# ---------------- Reports ----------------
def books_frame(library: Sequence[Book]) -> pd.DataFrame:
    """
    Produce a DataFrame suitable for reporting the books inventory.

    The returned DataFrame contains human-friendly Availability values.
    """
    rows = [{"Title": b.title, "Author": b.author, "ISBN": b.isbn,
             "Availability": "Available" if b.available else "Issued"} for b in library]
    return pd.DataFrame(rows, columns=["Title", "Author", "ISBN", "Availability"])


def users_frame(users: Sequence[User]) -> pd.DataFrame:
    """
    Build a DataFrame summarizing users and their current borrowed books.

    Returns columns: ID, Name, BorrowedCount, BorrowedBooks (comma separated ISBNs).
    """
    rows = [{"ID": u.id, "Name": u.name, "BorrowedCount": len(u.borrowed_books),
             "BorrowedBooks": ",".join(b.isbn for b in u.borrowed_books)} for u in users]
    return pd.DataFrame(rows, columns=["ID", "Name", "BorrowedCount", "BorrowedBooks"])


# ---------------- CLI ----------------
def print_menu():
    print("\n--- Library (CLI) ---")
    print("1. Add book")
    print("2. List books")
    print("3. Remove book")
    print("4. Add user")
    print("5. List users")
    print("6. Remove user")
    print("7. Borrow book")
    print("8. Return book")
    print("9. Books borrowed by user")
    print("10. Exit")


def cli_loop(state: LibraryState) -> LibraryState:
    """
    Interactive command-loop for the library.

    Each accepted command replaces the lists held in `state`; rejected
    commands print the error and leave the state as it was.
    """
    while True:
        print_menu()
        choice = read_choice("Choose (1-10): ")
        if choice is None or choice == "10":
            print("Thanks for using the library.")
            break
        elif choice == "1":
            title = input_prompt("Title: ")
            author = input_prompt("Author: ")
            isbn = input_prompt("ISBN: ")
            res = add_book(state.books, Book(title=title, author=author, isbn=isbn))
            if res.ok:
                state.books = res.value
                print("Added.")
            else:
                print(f"Error: {res.message}")
        elif choice == "2":
            print("Books in the library:")
            if state.books:
                print(books_frame(list_books(state.books)).to_string(index=False))
        elif choice == "3":
            isbn = input_prompt("ISBN of the book to remove: ")
            state.books = remove_book(state.books, isbn)
        elif choice == "4":
            name = input_prompt("Name: ")
            user_id = input_prompt("User ID: ")
            res = add_user(state.users, User(name=name, id=user_id))
            if res.ok:
                state.users = res.value
                print("Registered.")
            else:
                print(f"Error: {res.message}")
        elif choice == "5":
            print("Users of the library:")
            if state.users:
                print(users_frame(list_users(state.users)).to_string(index=False))
        elif choice == "6":
            user_id = input_prompt("ID of the user to remove: ")
            state.users = remove_user(state.users, user_id)
        elif choice == "7":
            user_id = input_prompt("User ID: ")
            isbn = input_prompt("ISBN of the book to borrow: ")
            res = borrow_book(state.books, state.users, user_id, isbn)
            if res.ok:
                state.books, state.users = res.value
                print("Book borrowed.")
            else:
                print(f"Error: {res.message}")
        elif choice == "8":
            user_id = input_prompt("User ID: ")
            isbn = input_prompt("ISBN of the book to return: ")
            res = return_book(state.books, state.users, user_id, isbn)
            if res.ok:
                state.books, state.users = res.value
                print("Book returned.")
            else:
                print(f"Error: {res.message}")
        elif choice == "9":
            user_id = input_prompt("User ID: ")
            borrowed = books_borrowed_by_user(state.users, user_id)
            if not borrowed:
                print("No books borrowed by this user.")
            else:
                print(f"Books borrowed by {user_id}:")
                for b in borrowed:
                    print(f"{b.title} | {b.author} | {b.isbn}")
        else:
            print("Unknown choice. Try again.")
    return state


def demo_run():
    """Start an interactive session with an empty library."""
    cli_loop(LibraryState())


if __name__ == "__main__":
    demo_run()
