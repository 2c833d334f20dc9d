"""
Input Validation Tests
======================

Configuration errors are detected eagerly, at the call that introduces the
bad input:
- Authority.generate_keys -> InvalidParameters
- RuleGenerator.new_token -> InvalidRule
- Agent.encrypt -> ValueOutOfRange (bad value), MalformedInput (bad identifier)
"""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from crypmon import GroupEnvironment
from crypmon.errors import (
    CrypmonError, InvalidParameters, InvalidRule, MalformedInput, ValueOutOfRange
)
from cms_authority import setup, Authority
from cms_rules import WILDCARD


@pytest.fixture(scope="module")
def params():
    return setup(GroupEnvironment('MNT224'))


@pytest.fixture(scope="module")
def authority(params):
    return Authority(params)


@pytest.fixture(scope="module")
def key_set(authority):
    return authority.generate_keys(3, 8)


# ============================================================================
# Key generation
# ============================================================================

@pytest.mark.parametrize("n, bitwidth", [
    (0, 8),
    (-1, 8),
    (3, 0),
    (3, -4),
    ("3", 8),
    (3, 8.0),
    (True, 8),
])
def test_generate_keys_rejects_bad_parameters(authority, n, bitwidth):
    with pytest.raises(InvalidParameters):
        authority.generate_keys(n, bitwidth)


def test_generate_keys_rejects_bitwidth_beyond_group_order(params, authority):
    with pytest.raises(InvalidParameters):
        authority.generate_keys(2, params.max_bitwidth() + 1)


def test_generate_keys_accepts_largest_bitwidth(params, authority):
    bitwidth = params.max_bitwidth()
    assert 2 ** bitwidth <= params.p

    rule_generator, agents = authority.generate_keys(1, bitwidth)
    assert rule_generator.bitwidth == bitwidth
    agents[0].encrypt("identifier", 2 ** bitwidth - 1)


def test_generate_keys_shapes(key_set):
    rule_generator, agents = key_set
    assert rule_generator.n == 3
    assert [a.index for a in agents] == [0, 1, 2]
    assert all(a.bitwidth == 8 for a in agents)


# ============================================================================
# Token construction
# ============================================================================

@pytest.mark.parametrize("rule", [
    [16, WILDCARD],
    [16, WILDCARD, 12, 0],
    [],
])
def test_new_token_rejects_length_mismatch(key_set, rule):
    rule_generator, _ = key_set
    with pytest.raises(InvalidRule):
        rule_generator.new_token(rule)


@pytest.mark.parametrize("rule", [
    [256, WILDCARD, 12],
    [16, WILDCARD, 1000],
    [-2, WILDCARD, 12],
    ["16", WILDCARD, 12],
    [16.0, WILDCARD, 12],
    [16, None, 12],
    [False, WILDCARD, 12],
])
def test_new_token_rejects_bad_entries(key_set, rule):
    rule_generator, _ = key_set
    with pytest.raises(InvalidRule):
        rule_generator.new_token(rule)


def test_new_token_rejects_non_sequences(key_set):
    rule_generator, _ = key_set
    with pytest.raises(InvalidRule):
        rule_generator.new_token("abc")
    with pytest.raises(InvalidRule):
        rule_generator.new_token(16)


def test_new_token_accepts_boundaries(key_set):
    rule_generator, _ = key_set
    token = rule_generator.new_token((0, WILDCARD, 255))
    assert token.rule_length == 3


# ============================================================================
# Encryption
# ============================================================================

@pytest.mark.parametrize("value", [256, 1 << 20, -1, 3.0, "3", None, True])
def test_encrypt_rejects_out_of_range(key_set, value):
    _, agents = key_set
    with pytest.raises(ValueOutOfRange):
        agents[0].encrypt("identifier", value)


def test_encrypt_accepts_boundaries(key_set):
    _, agents = key_set
    for value in (0, 255):
        ct = agents[1].encrypt("identifier", value)
        assert ct.agent_index == 1
        assert ct.identifier == "identifier"
        assert len(ct.elements) == 5


def test_encrypt_rejects_non_string_identifier(key_set):
    _, agents = key_set
    for identifier in (b"identifier", 42, None):
        with pytest.raises(MalformedInput):
            agents[0].encrypt(identifier, 1)


def test_errors_are_value_errors():
    for cls in (InvalidParameters, InvalidRule, ValueOutOfRange, MalformedInput):
        assert issubclass(cls, CrypmonError)
        assert issubclass(cls, ValueError)
