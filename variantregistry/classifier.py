"""Calculate the variant map for a single CI job.

Precedence per dimension, highest first:
  1. rules applied to the job name (see rules.py)
  2. entries from the job's variant override file
  3. hard-coded defaults

The result always contains every dimension except the release family,
Platform and Network, which are left out when they do not apply to the job.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from variantregistry import rules
from variantregistry.variants import (
    DIMENSION_DEFAULTS,
    IGNORED_OVERRIDE_KEYS,
    VARIANT_ARCH,
    VARIANT_CGROUP_MODE,
    VARIANT_CONTAINER_RUNTIME,
    VARIANT_FROM_RELEASE,
    VARIANT_FROM_RELEASE_MAJOR,
    VARIANT_FROM_RELEASE_MINOR,
    VARIANT_INSTALLER,
    VARIANT_NETWORK,
    VARIANT_NETWORK_ACCESS,
    VARIANT_NETWORK_STACK,
    VARIANT_OWNER,
    VARIANT_PLATFORM,
    VARIANT_RELEASE,
    VARIANT_RELEASE_MAJOR,
    VARIANT_RELEASE_MINOR,
    VARIANT_SECURITY_MODE,
    VARIANT_SUITE,
    VARIANT_TOPOLOGY,
    VARIANT_UPGRADE,
)

_log = logging.getLogger(__name__)

# Dimensions resolved by a plain first-match lookup over the name tokens.
_TOKEN_RULES = (
    (VARIANT_INSTALLER, rules.INSTALLER_RULES),
    (VARIANT_PLATFORM, rules.PLATFORM_RULES),
    (VARIANT_NETWORK, rules.NETWORK_RULES),
    (VARIANT_NETWORK_STACK, rules.NETWORK_STACK_RULES),
    (VARIANT_NETWORK_ACCESS, rules.NETWORK_ACCESS_RULES),
    (VARIANT_OWNER, rules.OWNER_RULES),
    (VARIANT_TOPOLOGY, rules.TOPOLOGY_RULES),
    (VARIANT_SUITE, rules.SUITE_RULES),
    (VARIANT_SECURITY_MODE, rules.SECURITY_MODE_RULES),
    (VARIANT_CONTAINER_RUNTIME, rules.CONTAINER_RUNTIME_RULES),
    (VARIANT_CGROUP_MODE, rules.CGROUP_MODE_RULES),
)


def _set_release(variants: Dict[str, str], key: str, major_key: str, minor_key: str, release: str) -> None:
    major, minor = release.split(".", 1)
    variants[key] = release
    variants[major_key] = major
    variants[minor_key] = minor


def upgrade_type(tokens: List[str], releases: List[str]) -> str:
    """Classify the upgrade given the distinct releases found in the name.

    Only called for jobs with a from-release. Two releases one minor apart are a
    minor upgrade; any longer or wider chain is 'multi'.
    """
    if len(releases) > 2:
        return "multi"
    if len(releases) == 2:
        frm = rules.parse_version(releases[0])
        to = rules.parse_version(releases[1])
        if frm and to and frm[0] == to[0] and to[1] - frm[1] == 1:
            return "minor"
        return "multi"
    if rules.matches_any(tokens, rules.DOWNGRADE_TRIGGERS):
        return "micro-downgrade"
    return "micro"


def name_variants(job_name: str) -> Dict[str, str]:
    """Variants determined by the job name alone."""
    tokens = rules.tokenize(job_name)
    variants: Dict[str, str] = {}

    releases = rules.extract_releases(tokens)
    if releases:
        _set_release(variants, VARIANT_RELEASE, VARIANT_RELEASE_MAJOR, VARIANT_RELEASE_MINOR, releases[-1])
        from_release: Optional[str] = None
        if len(releases) > 1:
            from_release = releases[0]
        elif rules.matches_any(tokens, rules.UPGRADE_TRIGGERS):
            # Same-version upgrade jobs (micro, out-of-change) name one release.
            from_release = releases[0]
        if from_release:
            _set_release(variants, VARIANT_FROM_RELEASE, VARIANT_FROM_RELEASE_MAJOR,
                         VARIANT_FROM_RELEASE_MINOR, from_release)
            variants[VARIANT_UPGRADE] = upgrade_type(tokens, releases)
        else:
            variants[VARIANT_UPGRADE] = "none"

    arch = rules.detect_architecture(tokens)
    if arch:
        variants[VARIANT_ARCH] = arch

    for key, table in _TOKEN_RULES:
        value = rules.first_match(tokens, table)
        if value is not None:
            variants[key] = value
    return variants


def classify_job(job_name: str, overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Return the complete variant map for one job. Never raises for any input."""
    variants = name_variants(job_name)

    for key, value in (overrides or {}).items():
        if key in IGNORED_OVERRIDE_KEYS:
            continue
        if key in variants:
            if variants[key] != str(value):
                _log.debug("job %s: ignoring override %s=%s, name gives %s", job_name, key, value, variants[key])
            continue
        variants[key] = str(value)

    # An overridden release still gets its major/minor split.
    for key, major_key, minor_key in (
        (VARIANT_RELEASE, VARIANT_RELEASE_MAJOR, VARIANT_RELEASE_MINOR),
        (VARIANT_FROM_RELEASE, VARIANT_FROM_RELEASE_MAJOR, VARIANT_FROM_RELEASE_MINOR),
    ):
        ver = rules.parse_version(variants.get(key, ""))
        if ver is not None:
            variants.setdefault(major_key, str(ver[0]))
            variants.setdefault(minor_key, str(ver[1]))

    for key, value in DIMENSION_DEFAULTS.items():
        variants.setdefault(key, value)
    if VARIANT_NETWORK not in variants:
        network = rules.default_network(variants.get(VARIANT_RELEASE))
        if network:
            variants[VARIANT_NETWORK] = network
    return variants


def classify_jobs(jobs: Mapping[str, Optional[Mapping[str, str]]]) -> Dict[str, Dict[str, str]]:
    """Classify many jobs at once: {job_name: overrides} -> {job_name: variants}."""
    return {job: classify_job(job, overrides) for job, overrides in jobs.items()}
