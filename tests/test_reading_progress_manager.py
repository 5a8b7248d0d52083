import pytest

from core.exceptions import NotFoundError, ValidationError
from models.reading_progress import ReadingProgressModel
from utils.reading_progress_manager import ReadingProgressManager


@pytest.fixture
def library(db):
    return ReadingProgressManager(db)


@pytest.fixture
def book(library):
    return library.create_book("Holes", "Louis Sachar", "Adventure", pages=233)


def test_list_books_by_genre(library, book):
    other = library.create_book("Wonder", "R. J. Palacio", "Drama")

    assert [b.book_id for b in library.list_books()] == [book.book_id, other.book_id]
    assert [b.book_id for b in library.list_books("Drama")] == [other.book_id]


def test_first_update_starts_the_book(library, make_account, book):
    reader = make_account()
    assert library.get_progress(reader.user_id, book.book_id) is None

    progress = library.update_progress(reader.user_id, book.book_id, progress=20)

    assert progress.status == "reading"
    assert progress.progress == 20
    assert progress.started_at
    assert progress.completed_at is None
    assert progress.book.title == "Holes"


def test_one_row_per_reader_and_book(library, make_account, book, db):
    reader = make_account()
    library.update_progress(reader.user_id, book.book_id, progress=20)
    library.update_progress(reader.user_id, book.book_id, progress=60)

    rows = db.query(ReadingProgressModel).all()
    assert [(r.user_id, r.progress) for r in rows] == [(reader.user_id, 60)]


def test_omitted_fields_are_kept(library, make_account, book):
    reader = make_account()
    library.update_progress(reader.user_id, book.book_id, status="wishlist", progress=5)

    progress = library.update_progress(reader.user_id, book.book_id, progress=10)

    assert progress.status == "wishlist"
    assert progress.progress == 10


def test_completing_a_book(library, make_account, book):
    reader = make_account()
    library.update_progress(reader.user_id, book.book_id, progress=40)

    done = library.update_progress(reader.user_id, book.book_id, status="completed")
    assert done.progress == 100
    assert done.completed_at is not None

    again = library.update_progress(reader.user_id, book.book_id, status="reading")
    assert again.completed_at is None
    assert again.progress == 100


def test_readers_are_independent(library, make_account, book):
    first = make_account()
    second = make_account()
    library.update_progress(first.user_id, book.book_id, progress=30)

    assert library.get_progress(second.user_id, book.book_id) is None
    assert [p.book_id for p in library.list_progress(first.user_id)] == [book.book_id]
    assert library.list_progress(second.user_id) == []


def test_unknown_book(library, make_account):
    reader = make_account()
    with pytest.raises(NotFoundError):
        library.update_progress(reader.user_id, "missing", progress=10)


@pytest.mark.parametrize(
    "fields", [{"status": "abandoned"}, {"progress": -1}, {"progress": 101}]
)
def test_invalid_values(library, make_account, book, fields):
    reader = make_account()
    with pytest.raises(ValidationError):
        library.update_progress(reader.user_id, book.book_id, **fields)
    assert library.get_progress(reader.user_id, book.book_id) is None
