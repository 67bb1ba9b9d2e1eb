import pytest

from smartdict.errors import KeyNotFoundError, NoSuchAttributeError, ProtectedAttributeError
from smartdict.resolver import (
    ATTR_REGEXP,
    FORBIDDEN_ATTRS,
    Access,
    Action,
    Decision,
    is_attr_name,
    is_special_name,
    resolve,
)

HOST = frozenset({'size', 'keys', 'young?'})


@pytest.mark.parametrize('name', ['', '911', '911abc', 'young?', 'go!', 'good_attr=', 'héllo'])
def test_attr_regexp_rejects(name):
    assert ATTR_REGEXP.fullmatch(name) is None
    assert not is_attr_name(name)


@pytest.mark.parametrize('name', ['good_attr', '_', '__abc99__', 'Name2'])
def test_attr_regexp_accepts(name):
    assert ATTR_REGEXP.fullmatch(name) is not None
    assert is_attr_name(name)


def test_is_attr_name_requires_str():
    assert not is_attr_name(1)
    assert not is_attr_name(b'name')
    assert not is_attr_name(None)


def test_is_special_name():
    assert is_special_name('__class__')
    assert is_special_name('__abc99__')
    assert not is_special_name('__')
    assert not is_special_name('____')
    assert not is_special_name('_private')
    assert not is_special_name('__mangled')


def test_forbidden_attrs_constant():
    assert FORBIDDEN_ATTRS == frozenset({'default', 'default_factory', 'strict'})
    assert isinstance(FORBIDDEN_ATTRS, frozenset)


@pytest.mark.parametrize('access', list(Access))
@pytest.mark.parametrize('name', sorted(FORBIDDEN_ATTRS) + ['__class__'])
def test_forbidden_and_special_names_defer_to_host(name, access):
    decision = resolve(name, access, declared=True, protected=True, present=True)
    assert decision.action is Action.DEFER_TO_HOST


class TestRead:
    def test_present_key_wins_over_host(self):
        decision = resolve('size', Access.READ, present=True, host_names=HOST)
        assert decision.action is Action.READ_ENTRY

    def test_declared_unset_is_key_not_found_when_strict(self):
        decision = resolve('size', Access.READ, declared=True, host_names=HOST)
        assert decision.action is Action.REJECT
        assert decision.error is KeyNotFoundError
        assert isinstance(decision.exception(), KeyNotFoundError)

    def test_declared_unset_reads_entry_when_loose(self):
        decision = resolve('size', Access.READ, strict=False, declared=True, host_names=HOST)
        assert decision.action is Action.READ_ENTRY

    def test_host_member(self):
        assert resolve('size', Access.READ, host_names=HOST).action is Action.DEFER_TO_HOST
        assert (
            resolve('size', Access.READ, strict=False, host_names=HOST).action
            is Action.DEFER_TO_HOST
        )

    def test_unknown_name(self):
        decision = resolve('name', Access.READ, host_names=HOST)
        assert decision.action is Action.REJECT
        assert decision.error is NoSuchAttributeError
        assert "'name'" in str(decision.exception())

        decision = resolve('name', Access.READ, strict=False, host_names=HOST)
        assert decision.action is Action.READ_ENTRY

    def test_invalid_name_never_reads_entry(self):
        decision = resolve('go!', Access.READ, strict=False, present=True, host_names=HOST)
        assert decision.action is Action.REJECT
        assert decision.error is NoSuchAttributeError

    def test_invalid_name_defined_by_host(self):
        decision = resolve('young?', Access.READ, present=True, host_names=HOST)
        assert decision.action is Action.DEFER_TO_HOST


class TestWrite:
    def test_write_entry(self):
        assert resolve('name', Access.WRITE).action is Action.WRITE_ENTRY
        assert resolve('size', Access.WRITE, host_names=HOST).action is Action.WRITE_ENTRY

    def test_protected(self):
        decision = resolve('name', Access.WRITE, protected=True)
        assert decision.action is Action.REJECT
        assert decision.error is ProtectedAttributeError
        assert decision.message == "Attribute 'name' is protected"

    def test_protection_only_applies_to_valid_names(self):
        assert resolve('go!', Access.WRITE, protected=True).action is Action.WRITE_ENTRY


class TestDelete:
    def test_present(self):
        assert resolve('name', Access.DELETE, present=True).action is Action.DELETE_ENTRY

    def test_absent(self):
        decision = resolve('name', Access.DELETE)
        assert decision.action is Action.REJECT
        assert decision.error is NoSuchAttributeError

    def test_protected(self):
        decision = resolve('name', Access.DELETE, protected=True, present=True)
        assert decision.error is ProtectedAttributeError


def test_decision_without_error_cannot_build_exception():
    with pytest.raises(RuntimeError):
        Decision(Action.READ_ENTRY).exception()
