"""
End-to-End Tests for the Cryptographic Monitoring System
========================================================

This module tests the complete scheme with:
- Authority: sets up parameters and generates linked key sets
- Agents: encrypt observations under a session identifier
- Rule Generator: compiles rules (with wildcards) into tokens
- Alarm System: tests a token against a set of ciphertexts

Test Coverage:
--------------
1. Happy Path - rule with a wildcard, matching observations
2. Single-slot mismatch
3. Identifier binding (including a forged identifier tag)
4. Unlinkability of repeated encryptions
5. All-wildcard rule
6. Key-set isolation
7. Token re-randomization
8. Ciphertext vector validation
"""

import dataclasses
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from crypmon import GroupEnvironment
from crypmon.errors import MalformedInput
from cms_authority import setup, Authority
from cms_rules import WILDCARD
from cms_alarm import AlarmSystem, new_alarm_system

IDENTIFIER = "identifier"
OTHER_IDENTIFIER = "some other identifier"


@pytest.fixture(scope="module")
def params():
    """Initialize pairing group and public parameters."""
    return setup(GroupEnvironment('MNT224'))


@pytest.fixture(scope="module")
def authority(params):
    return Authority(params)


@pytest.fixture(scope="module")
def key_set(authority):
    """Key set for 3 agents with 8-bit values."""
    return authority.generate_keys(3, 8)


@pytest.fixture(scope="module")
def token(key_set):
    rule_generator, _ = key_set
    return rule_generator.new_token([16, WILDCARD, 12])


def encrypt_all(agents, values, identifier=IDENTIFIER):
    return [agent.encrypt(identifier, v) for agent, v in zip(agents, values)]


class TestMonitoringScheme:
    """Test suite for the AND-of-equalities predicate with wildcards."""

    def test_1_positive_match(self, params, key_set, token):
        """
        Test 1: Happy Path.

        Rule [16, *, 12] against observations [16, 42, 12] -> alarm.
        """
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ciphertexts = encrypt_all(agents, [16, 42, 12])

        assert alarm_system.test(ciphertexts), "Test 1 failed: alarm should have been raised"
        print("✅ Test 1 passed: alarm raised on matching observations")

    @pytest.mark.parametrize("values", [
        [14, 42, 12],
        [16, 42, 13],
        [0, 0, 0],
        [12, 42, 16],
    ])
    def test_2_single_slot_mismatch(self, params, key_set, token, values):
        """
        Test 2: Changing a non-wildcard slot's value yields no alarm.
        """
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        assert not alarm_system.test(encrypt_all(agents, values)), \
            f"Test 2 failed: {values} should not match [16, *, 12]"

    def test_2_wildcard_slot_accepts_any_value(self, params, key_set, token):
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        for wildcard_value in (0, 1, 42, 255):
            assert alarm_system.test(encrypt_all(agents, [16, wildcard_value, 12]))

    def test_3_identifier_binding(self, params, key_set, token):
        """
        Test 3: Identifier Binding.

        Workflow:
        1. Agents 0 and 1 encrypt under the bound identifier
        2. Agent 2 encrypts the matching value under another identifier
        3. No alarm, even though every value matches
        """
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ciphertexts = [
            agents[0].encrypt(IDENTIFIER, 16),
            agents[1].encrypt(IDENTIFIER, 42),
            agents[2].encrypt(OTHER_IDENTIFIER, 12),
        ]
        assert not alarm_system.test(ciphertexts), "Test 3 failed: cross-identifier ciphertext matched"

        # All ciphertexts under the other identifier
        assert not alarm_system.test(encrypt_all(agents, [16, 42, 12], OTHER_IDENTIFIER))

        # The same ciphertexts do match an alarm system bound to their identifier
        other_alarm = new_alarm_system(params, token, OTHER_IDENTIFIER)
        assert other_alarm.test(encrypt_all(agents, [16, 42, 12], OTHER_IDENTIFIER))
        print("✅ Test 3 passed: ciphertexts are bound to their identifier")

    def test_3_forged_identifier_tag(self, params, key_set, token):
        """Rewriting the plaintext identifier tag does not move a ciphertext to another session."""
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ciphertexts = encrypt_all(agents, [16, 42, 12], OTHER_IDENTIFIER)
        forged = [dataclasses.replace(ct, identifier=IDENTIFIER) for ct in ciphertexts]

        assert not alarm_system.test(forged)

    def test_4_unlinkability(self, params, key_set, token):
        """
        Test 4: Two encryptions of the same (identifier, value) differ, yet
        both satisfy the same token slot.
        """
        _, agents = key_set
        env = params.env
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ct_a = agents[0].encrypt(IDENTIFIER, 16)
        ct_b = agents[0].encrypt(IDENTIFIER, 16)
        assert ct_a.to_bytes(env) != ct_b.to_bytes(env), "Test 4 failed: encryption is deterministic"

        rest = [agents[1].encrypt(IDENTIFIER, 42), agents[2].encrypt(IDENTIFIER, 12)]
        assert alarm_system.test([ct_a] + rest)
        assert alarm_system.test([ct_b] + rest)
        print("✅ Test 4 passed: repeated encryptions are unlinkable")

    def test_5_all_wildcard(self, params, key_set):
        """
        Test 5: An all-wildcard rule matches any values under the bound identifier.
        """
        rule_generator, agents = key_set
        token = rule_generator.new_token([WILDCARD, WILDCARD, WILDCARD])
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        for values in ([0, 0, 0], [255, 1, 128], [16, 42, 12]):
            assert alarm_system.test(encrypt_all(agents, values)), f"{values} should match all wildcards"

        assert not alarm_system.test(encrypt_all(agents, [1, 2, 3], OTHER_IDENTIFIER))

    def test_6_key_set_isolation(self, params, authority, key_set):
        """
        Test 6: Key-Set Isolation.

        Workflow:
        1. A second key set is generated by the same Authority, same n and b
        2. Same rule, same values
        3. Tokens of one set never match ciphertexts of the other
        """
        rule_generator_a, agents_a = key_set
        rule_generator_b, agents_b = authority.generate_keys(3, 8)

        rule = [16, WILDCARD, 12]
        values = [16, 42, 12]
        token_a = rule_generator_a.new_token(rule)
        token_b = rule_generator_b.new_token(rule)

        # Sanity: each set works on its own
        assert new_alarm_system(params, token_a, IDENTIFIER).test(encrypt_all(agents_a, values))
        assert new_alarm_system(params, token_b, IDENTIFIER).test(encrypt_all(agents_b, values))

        assert not new_alarm_system(params, token_a, IDENTIFIER).test(encrypt_all(agents_b, values))
        assert not new_alarm_system(params, token_b, IDENTIFIER).test(encrypt_all(agents_a, values))

        # Mixed ciphertext vectors fail too
        mixed = encrypt_all(agents_a[:2], values[:2]) + [agents_b[2].encrypt(IDENTIFIER, 12)]
        assert not new_alarm_system(params, token_a, IDENTIFIER).test(mixed)
        print("✅ Test 6 passed: key sets are isolated")

    def test_6_key_set_isolation_all_wildcard(self, params, authority, key_set):
        """Even a rule without constraints does not accept foreign ciphertexts."""
        rule_generator_a, _ = key_set
        _, agents_b = authority.generate_keys(3, 8)

        token = rule_generator_a.new_token([WILDCARD] * 3)
        assert not new_alarm_system(params, token, IDENTIFIER).test(encrypt_all(agents_b, [1, 2, 3]))

    def test_7_tokens_are_rerandomized(self, params, key_set):
        """
        Test 7: Two tokens for the same rule differ but classify identically.
        """
        rule_generator, agents = key_set
        env = params.env

        token_1 = rule_generator.new_token([16, WILDCARD, 12])
        token_2 = rule_generator.new_token([16, WILDCARD, 12])
        assert token_1.to_bytes(env) != token_2.to_bytes(env)

        match = encrypt_all(agents, [16, 7, 12])
        no_match = encrypt_all(agents, [16, 7, 11])
        for token in (token_1, token_2):
            alarm_system = new_alarm_system(params, token, IDENTIFIER)
            assert alarm_system.test(match)
            assert not alarm_system.test(no_match)

    def test_7_repeated_tests_are_pure(self, params, key_set, token):
        """The alarm system keeps no state between tests."""
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        match = encrypt_all(agents, [16, 42, 12])
        no_match = encrypt_all(agents, [15, 42, 12])
        results = [alarm_system.test(cts) for cts in (match, no_match, match, no_match)]
        assert results == [True, False, True, False]

    def test_legacy_wildcard(self, params, key_set):
        """-1 compiles to a wildcard."""
        rule_generator, agents = key_set
        token = rule_generator.new_token([16, -1, 12])
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        assert alarm_system.test(encrypt_all(agents, [16, 99, 12]))
        assert not alarm_system.test(encrypt_all(agents, [17, 99, 12]))

    def test_single_agent(self, params, authority):
        rule_generator, agents = authority.generate_keys(1, 16)
        token = rule_generator.new_token([65535])
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        assert alarm_system.test([agents[0].encrypt(IDENTIFIER, 65535)])
        assert not alarm_system.test([agents[0].encrypt(IDENTIFIER, 65534)])


class TestCiphertextVectorValidation:
    """Structural checks performed by AlarmSystem.test."""

    def test_wrong_length(self, params, key_set, token):
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        with pytest.raises(MalformedInput):
            alarm_system.test(encrypt_all(agents[:2], [16, 42]))
        with pytest.raises(MalformedInput):
            alarm_system.test([])

    def test_duplicate_index(self, params, key_set, token):
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ciphertexts = [
            agents[0].encrypt(IDENTIFIER, 16),
            agents[0].encrypt(IDENTIFIER, 16),
            agents[2].encrypt(IDENTIFIER, 12),
        ]
        with pytest.raises(MalformedInput):
            alarm_system.test(ciphertexts)

    def test_index_out_of_range(self, params, key_set, token):
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ciphertexts = encrypt_all(agents, [16, 42, 12])
        ciphertexts[1] = dataclasses.replace(ciphertexts[1], agent_index=3)
        with pytest.raises(MalformedInput):
            alarm_system.test(ciphertexts)

    def test_not_a_ciphertext(self, params, key_set, token):
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ciphertexts = encrypt_all(agents, [16, 42, 12])
        ciphertexts[2] = "ciphertext"
        with pytest.raises(MalformedInput):
            alarm_system.test(ciphertexts)

    def test_truncated_payload(self, params, key_set, token):
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ciphertexts = encrypt_all(agents, [16, 42, 12])
        ciphertexts[0] = dataclasses.replace(ciphertexts[0], elements=ciphertexts[0].elements[:4])
        with pytest.raises(MalformedInput):
            alarm_system.test(ciphertexts)

    def test_permuted_vector(self, params, key_set, token):
        """Slots are matched by the embedded agent index, not by position."""
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ciphertexts = encrypt_all(agents, [16, 42, 12])
        assert alarm_system.test(list(reversed(ciphertexts)))

        no_match = encrypt_all(agents, [12, 42, 16])
        assert not alarm_system.test(list(reversed(no_match)))

    def test_moved_ciphertext_fails(self, params, key_set, token):
        """Relabelling a ciphertext with another agent's index breaks the match."""
        _, agents = key_set
        alarm_system = new_alarm_system(params, token, IDENTIFIER)

        ciphertexts = encrypt_all(agents, [16, 12, 12])
        swapped = [
            ciphertexts[0],
            dataclasses.replace(ciphertexts[2], agent_index=1),
            dataclasses.replace(ciphertexts[1], agent_index=2),
        ]
        assert not alarm_system.test(swapped)

    def test_rejects_non_token(self, params):
        with pytest.raises(MalformedInput):
            AlarmSystem(params, [16, WILDCARD, 12], IDENTIFIER)

    def test_rejects_non_string_identifier(self, params, token):
        for identifier in (b"identifier", 42, None):
            with pytest.raises(MalformedInput):
                new_alarm_system(params, token, identifier)
