"""Simulated LOD cloud: end-to-end dereferenceability estimate.

Streams a small N-Triples dataset through the estimator, resolves the
sample against a simulated web (no real network), and prints:

  SAMPLING   : pay-level domains kept and the URIs sampled in each
  RESOLUTION : the estimate, with its outcome breakdown
  PROBLEMS   : URIs not served by 303 to RDF, as qpro/dqmprob RDF

Run with:  python -m case_studies.simulated_lod_cloud.run
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from ldderef.cache import DereferenceCache
from ldderef.config import EstimatorConfig
from ldderef.estimator import DereferenceabilityEstimator
from ldderef.fetcher import Fetcher
from ldderef.stream import observe_ntriples
from ldderef.types import DereferenceabilityEstimate

from .web import DATASET, build_client


def print_header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def build_config() -> EstimatorConfig:
    return EstimatorConfig(
        max_domains=50,
        max_uris_per_domain=50,
        fetch_concurrency=4,
        fetch_timeout_budget=30.0,
        problem_reporting_enabled=True,
        retry_attempts=1,
        seed=7,
    )


def run_estimate(config: EstimatorConfig | None = None) -> tuple[DereferenceabilityEstimator, DereferenceabilityEstimate]:
    """Sample the dataset and resolve it against the simulated cloud."""
    config = config or build_config()
    fetcher = Fetcher.from_config(config, DereferenceCache(), client=build_client())
    estimator = DereferenceabilityEstimator(config, fetcher=fetcher)
    try:
        observe_ntriples(estimator, DATASET)
        result = estimator.estimate()
    finally:
        fetcher.close()
    return estimator, result


def main():
    estimator, result = run_estimate()

    print_header("SAMPLING")
    for domain in sorted(estimator.domains(), key=lambda d: d.name):
        print(f"\n  {domain.name}")
        for uri in sorted(domain.sampled_uris()):
            print(f"    - {uri}")

    print_header("RESOLUTION")
    for line in result.summary().split("\n"):
        print(f"  {line}")

    print_header("PROBLEMS")
    print(estimator.problems.as_turtle())


if __name__ == "__main__":
    main()
