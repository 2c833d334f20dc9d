#!/usr/bin/env python3
"""
Performance Evaluation
======================

Measures the running time of the scheme's four algorithms:
- Setup: a new Authority and one key generation
- Encrypt: one agent encryption
- GenToken: one token for the all-16 rule
- Test: a new alarm system and one test of matching ciphertexts

Each selected algorithm runs ``experiments`` times per run, over ``runs``
runs. The report gives the per-invocation sample mean, the standard
deviation and the sample variance (n-1 denominator) across runs.

Usage:
    python doc/performance_evaluation.py --agents 5 --encrypt --test
    python doc/performance_evaluation.py --param-file a.param --setup --dat-output
"""

import argparse
import os
import sys
import time
from typing import Dict, List, Optional, Tuple

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from crypmon import GroupEnvironment
from crypmon.config import config
from cms_authority import setup, Authority
from cms_alarm import new_alarm_system

ALGORITHMS = ('Setup', 'Encrypt', 'GenToken', 'Test')
IDENTIFIER = "identifier"
BENCH_VALUE = 16


def compute_statistics(run_durations: List[float], experiments: int) -> Tuple[float, float, float]:
    """
    Per-invocation statistics of a series of runs.

    Parameters
    ----------
    run_durations : List[float]
        Total duration (seconds) of each run
    experiments : int
        Invocations per run

    Returns
    -------
    (mean, standard deviation, sample variance) in seconds
    """
    if len(run_durations) < 2:
        raise ValueError("At least two runs are needed to estimate the variance")
    per_call = np.asarray(run_durations, dtype=float) / experiments
    variance = float(per_call.var(ddof=1))
    return float(per_call.mean()), float(np.sqrt(variance)), variance


class PerformanceEvaluation:
    """Timing harness around one deployment of the scheme."""

    def __init__(self, env: GroupEnvironment, agents: int, bitwidth: Optional[int] = None):
        self.params = setup(env)
        self.agents = agents
        self.bitwidth = config.bitwidth if bitwidth is None else bitwidth
        # stays inside the message space for small bit-widths
        self.value = BENCH_VALUE % (1 << self.bitwidth)
        self.rule_generator, self.agent_keys = Authority(self.params).generate_keys(agents, self.bitwidth)
        self.rule = [self.value] * agents
        self.token = self.rule_generator.new_token(self.rule)
        self.ciphertexts = [a.encrypt(IDENTIFIER, self.value) for a in self.agent_keys]

    def time_setup(self, experiments: int) -> float:
        start = time.perf_counter()
        for _ in range(experiments):
            Authority(self.params).generate_keys(self.agents, self.bitwidth)
        return time.perf_counter() - start

    def time_encrypt(self, experiments: int) -> float:
        agent = self.agent_keys[0]
        start = time.perf_counter()
        for _ in range(experiments):
            agent.encrypt(IDENTIFIER, self.value)
        return time.perf_counter() - start

    def time_gentoken(self, experiments: int) -> float:
        start = time.perf_counter()
        for _ in range(experiments):
            self.rule_generator.new_token(self.rule)
        return time.perf_counter() - start

    def time_test(self, experiments: int) -> float:
        start = time.perf_counter()
        for _ in range(experiments):
            alarm_system = new_alarm_system(self.params, self.token, IDENTIFIER)
            alarm_system.test(self.ciphertexts)
        return time.perf_counter() - start

    def run(self, selected: List[str], experiments: int, runs: int) -> Dict[str, Tuple[float, float, float]]:
        """Run the selected algorithms and return their statistics."""
        timers = {
            'Setup': self.time_setup,
            'Encrypt': self.time_encrypt,
            'GenToken': self.time_gentoken,
            'Test': self.time_test,
        }
        durations = {name: [] for name in selected}

        print("Progress: 0%", end="", file=sys.stderr, flush=True)
        for i in range(runs):
            for name in selected:
                durations[name].append(timers[name](experiments))
            print(f"\rProgress: {int((i + 1) * 100 / runs)}%", end="", file=sys.stderr, flush=True)
        print("", file=sys.stderr)

        return {name: compute_statistics(durations[name], experiments) for name in selected}


def format_results(results: Dict[str, Tuple[float, float, float]], agents: int, dat_output: bool) -> List[str]:
    """Render the statistics as a table, or as whitespace-separated dat lines."""
    lines = []
    if not dat_output:
        lines.append(f"{'Algorithm':<10} + {'Mean (s)':<10} + {'SD σ (s)':<10} + {'Var. (s²)':<10}")
    for name in ALGORITHMS:
        if name not in results:
            continue
        mean, sd, var = results[name]
        if dat_output:
            lines.append(f"{name:<10} {agents:<5d} {mean:10.7f} {sd:10.7f} {var:10.7f}")
        else:
            lines.append(f"{name:<10} | {mean:10.7f} | {sd:10.7f} | {var:10.7f}")
    return lines


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Measure the running time of the Cryptographic Monitoring System")
    ap.add_argument("--curve", default=config.pairing_curve,
                    help=f"Pairing curve (default: {config.pairing_curve})")
    ap.add_argument("--param-file", default=None, help="File containing PBC curve parameters")
    ap.add_argument("--dat-output", action="store_true", help="Output dat lines")
    ap.add_argument("--experiments", type=int, default=100, help="Number of experiments to run (default: 100)")
    ap.add_argument("--agents", type=int, default=config.agents,
                    help=f"Number of agents in the system (default: {config.agents})")
    ap.add_argument("--runs", type=int, default=5, help="Number of runs of the experiments (default: 5)")
    ap.add_argument("--bitwidth", type=int, default=config.bitwidth,
                    help=f"Message space bit-width of each agent (default: {config.bitwidth})")
    ap.add_argument("--setup", action="store_true", help="Benchmark the Setup algorithm")
    ap.add_argument("--encrypt", action="store_true", help="Benchmark the Encrypt algorithm")
    ap.add_argument("--gentoken", action="store_true", help="Benchmark the GenToken algorithm")
    ap.add_argument("--test", action="store_true", help="Benchmark the Test algorithm")
    return ap


def main(argv=None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    selected = [name for name, flag in zip(ALGORITHMS, (args.setup, args.encrypt, args.gentoken, args.test))
                if flag]
    if not selected:
        ap.error("Please select at least one algorithm to run.")
    if args.runs < 2:
        ap.error("At least two runs are needed to estimate the variance.")
    if args.experiments < 1 or args.agents < 1 or args.bitwidth < 1:
        ap.error("--experiments, --agents and --bitwidth must be positive.")

    if not args.dat_output:
        print("Performance evaluation of the Cryptographic Monitoring System")
        print(f"Doing {args.runs} runs, with {args.experiments} experiments each.")
        print(f"Number of agents: {args.agents}")

    if args.param_file:
        env = GroupEnvironment(param_file=args.param_file, seed=config.seed)
    else:
        env = GroupEnvironment(args.curve, seed=config.seed)

    evaluation = PerformanceEvaluation(env, args.agents, args.bitwidth)
    results = evaluation.run(selected, args.experiments, args.runs)
    for line in format_results(results, args.agents, args.dat_output):
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
