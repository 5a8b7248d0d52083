import pytest

from core.exceptions import NotFoundError
from utils.parent_link_manager import ParentLinkManager


@pytest.fixture
def links(db):
    return ParentLinkManager(db)


def test_link_with_child_code(links, make_account):
    parent = make_account("parent")
    child = make_account("student", name="Kid")

    linked, link = links.link_with_child_code(parent.user_id, child.student_code)

    assert linked.user_id == child.user_id
    assert link.parent_id == parent.user_id
    children = links.list_children(parent.user_id)
    assert [(c.user_id, l.created_at) for c, l in children] == [(child.user_id, link.created_at)]


def test_linking_is_idempotent(links, make_account):
    parent = make_account("parent")
    child = make_account("student")

    _, first = links.link_with_child_code(parent.user_id, child.student_code)
    _, second = links.link_with_child_code(parent.user_id, child.student_code)

    assert first.id == second.id
    assert len(links.list_children(parent.user_id)) == 1


def test_unknown_code(links, make_account):
    parent = make_account("parent")
    with pytest.raises(NotFoundError):
        links.link_with_child_code(parent.user_id, "NOCODE")


def test_unlink(links, make_account):
    parent = make_account("parent")
    child = make_account("student")
    links.link_with_child_code(parent.user_id, child.student_code)

    assert links.unlink(parent.user_id, child.user_id) is True
    assert links.unlink(parent.user_id, child.user_id) is False
    assert links.list_children(parent.user_id) == []


def test_children_are_per_parent(links, make_account):
    mother = make_account("parent")
    father = make_account("parent")
    child = make_account("student")
    links.link_with_child_code(mother.user_id, child.student_code)

    assert links.list_children(father.user_id) == []
