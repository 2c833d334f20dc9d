#!/usr/bin/env python3
"""
Cryptographic Monitoring System Demo
====================================

Three agents observe values under a shared identifier. The rule authority
raises an alarm when agent 0 sees 16 and agent 2 sees 12, whatever agent 1
sees.
"""

import sys

from crypmon import GroupEnvironment
from crypmon.config import config, configure_logging
from cms_authority import setup, Authority
from cms_rules import WILDCARD
from cms_alarm import new_alarm_system


def main():
    configure_logging()

    print("=" * 60)
    print("Cryptographic Monitoring System - sample code")
    print("=" * 60)

    # 1. System setup
    print("\n[1] Setting up the system...")
    params = setup(GroupEnvironment(config.pairing_curve, seed=config.seed))
    authority = Authority(params)
    rule_generator, agents = authority.generate_keys(3, config.bitwidth)
    print(f"✅ Keys generated for {len(agents)} agents over {params.env.group_name}")

    identifier = "identifier"

    # 2. Rule
    print("\n[2] Compiling rule [16, *, 12]...")
    token = rule_generator.new_token([16, WILDCARD, 12])
    alarm_system = new_alarm_system(params, token, identifier)

    # 3. Matching observations
    print("\n[3] Agents observe [16, 42, 12]...")
    ciphertexts_match = [
        agents[0].encrypt(identifier, 16),
        agents[1].encrypt(identifier, 42),
        agents[2].encrypt(identifier, 12),
    ]
    if alarm_system.test(ciphertexts_match):
        print("✅ Alarm was raised, as expected.")
    else:
        print("❌ No alarm was raised, whereas an alarm should have been raised.")
        return 1

    # 4. Non-matching observations
    print("\n[4] Agents observe [14, 42, 12]...")
    ciphertexts_no_match = [
        agents[0].encrypt(identifier, 14),
        agents[1].encrypt(identifier, 42),
        agents[2].encrypt(identifier, 12),
    ]
    if alarm_system.test(ciphertexts_no_match):
        print("❌ Alarm was raised whereas it should not have.")
        return 1
    print("✅ No alarm was raised, as expected.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
