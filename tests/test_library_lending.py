import itertools

import part_a_library_lending as lib
from keyed_store import ErrorKind
from part_a_library_lending import Book, LibraryState, User


def seeded():
    books = lib.add_book([], Book(title="Dune", author="Frank Herbert", isbn="123")).value
    books = lib.add_book(books, Book(title="Emma", author="Jane Austen", isbn="456")).value
    users = lib.add_user([], User(name="Ana", id="u1")).value
    users = lib.add_user(users, User(name="Ben", id="u2")).value
    return books, users


def test_borrow_marks_book_issued_and_user_holds_copy():
    books = lib.add_book([], Book(title="Dune", isbn="123")).value
    users = lib.add_user([], User(name="Ana", id="u1")).value

    res = lib.borrow_book(books, users, "u1", "123")

    assert res.ok
    new_books, new_users = res.value
    assert lib.find_book(new_books, "123").available is False
    held = lib.books_borrowed_by_user(new_users, "u1")
    assert [(b.isbn, b.available) for b in held] == [("123", False)]
    # inputs untouched
    assert books[0].available is True
    assert users[0].borrowed_books == ()


def test_borrow_unknown_user_leaves_everything_unchanged():
    books, users = seeded()
    books_before, users_before = list(books), list(users)
    res = lib.borrow_book(books, users, "u9", "123")
    assert res.error.kind is ErrorKind.HOLDER_NOT_FOUND
    assert res.value is None
    assert books == books_before
    assert users == users_before
    assert all(u.borrowed_books == () for u in users)
    assert lib.lending_violations(books, users) == []


def test_borrow_already_issued_book_is_unavailable():
    books, users = seeded()
    books, users = lib.borrow_book(books, users, "u1", "123").value
    res = lib.borrow_book(books, users, "u2", "123")
    assert res.error.kind is ErrorKind.ITEM_UNAVAILABLE
    assert lib.books_borrowed_by_user(users, "u2") == []


def test_borrow_missing_book_is_unavailable():
    books, users = seeded()
    assert lib.borrow_book(books, users, "u1", "999").error.kind is ErrorKind.ITEM_UNAVAILABLE


def test_return_restores_availability():
    books, users = seeded()
    books, users = lib.borrow_book(books, users, "u1", "123").value
    res = lib.return_book(books, users, "u1", "123")
    assert res.ok
    books, users = res.value
    assert lib.find_book(books, "123").available is True
    assert lib.books_borrowed_by_user(users, "u1") == []


def test_return_of_book_never_borrowed_is_not_held():
    books, users = seeded()
    res = lib.return_book(books, users, "u1", "456")
    assert res.error.kind is ErrorKind.ITEM_NOT_HELD


def test_return_by_unknown_user_is_holder_not_found():
    books, users = seeded()
    assert lib.return_book(books, users, "nobody", "123").error.kind is ErrorKind.HOLDER_NOT_FOUND


def test_return_after_book_removed_only_clears_user():
    books, users = seeded()
    books, users = lib.borrow_book(books, users, "u1", "123").value
    books = lib.remove_book(books, "123")
    books, users = lib.return_book(books, users, "u1", "123").value
    assert lib.find_book(books, "123") is None
    assert lib.books_borrowed_by_user(users, "u1") == []


def test_invariant_holds_across_borrow_return_sequences():
    books, users = seeded()
    ops = [
        ("borrow", "u1", "123"), ("borrow", "u2", "123"), ("borrow", "u2", "456"),
        ("return", "u1", "456"), ("return", "u1", "123"), ("borrow", "u2", "123"),
        ("return", "u2", "456"), ("borrow", "u1", "456"), ("return", "u9", "123"),
    ]
    for op, user_id, isbn in itertools.chain(ops, reversed(ops)):
        fn = lib.borrow_book if op == "borrow" else lib.return_book
        res = fn(books, users, user_id, isbn)
        if res.ok:
            books, users = res.value
        assert lib.lending_violations(books, users) == []


def test_lending_violations_detects_inconsistency():
    books = [Book(title="Dune", isbn="123", available=False)]
    users = [User(name="Ana", id="u1")]
    assert lib.lending_violations(books, users) == ["123"]


def test_duplicate_isbn_rejected():
    books, _ = seeded()
    res = lib.add_book(books, Book(title="Other", isbn="123"))
    assert res.error.kind is ErrorKind.DUPLICATE_KEY


def test_search_and_available_books():
    books, users = seeded()
    assert [b.isbn for b in lib.search_books(books, "austen")] == ["456"]
    assert lib.search_books(books, "  ") == []
    books, users = lib.borrow_book(books, users, "u1", "123").value
    assert [b.isbn for b in lib.available_books(books)] == ["456"]


def test_remove_user_and_unknown_user_holds_nothing():
    _, users = seeded()
    users = lib.remove_user(users, "u1")
    assert lib.find_user(users, "u1") is None
    assert lib.books_borrowed_by_user(users, "u1") == []


def test_report_frames():
    books, users = seeded()
    books, users = lib.borrow_book(books, users, "u2", "456").value
    bf = lib.books_frame(books)
    assert list(bf["Availability"]) == ["Available", "Issued"]
    uf = lib.users_frame(users)
    assert list(uf["BorrowedCount"]) == [0, 1]
    assert uf.loc[uf["ID"] == "u2", "BorrowedBooks"].iloc[0] == "456"


def test_cli_sequence(monkeypatch, capsys):
    answers = iter([
        "1", "Dune", "Frank Herbert", "123",
        "4", "Ana", "u1",
        "7", "u1", "123",
        "7", "u1", "123",
        "9", "u1",
        "8", "u1", "123",
        "42",
        "10",
    ])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

    state = lib.cli_loop(LibraryState())

    out = capsys.readouterr().out
    assert "Book borrowed." in out
    assert "Error: Book not available: 123" in out
    assert "Dune | Frank Herbert | 123" in out
    assert "Book returned." in out
    assert "Unknown choice" in out
    assert lib.find_book(state.books, "123").available
    assert lib.books_borrowed_by_user(state.users, "u1") == []


def test_cli_exits_when_input_closes(monkeypatch, capsys):
    def closed(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", closed)

    state = lib.cli_loop(LibraryState())

    assert "Thanks for using the library." in capsys.readouterr().out
    assert state.books == [] and state.users == []
