"""Variant dimension names shared by the classifier, the registry and the API.

The keys double as the accepted keys of per-job variant override files, so
they keep the registry's CamelCase spelling.
"""
from __future__ import annotations

VARIANT_RELEASE = "Release"
VARIANT_RELEASE_MAJOR = "ReleaseMajor"
VARIANT_RELEASE_MINOR = "ReleaseMinor"
VARIANT_FROM_RELEASE = "FromRelease"
VARIANT_FROM_RELEASE_MAJOR = "FromReleaseMajor"
VARIANT_FROM_RELEASE_MINOR = "FromReleaseMinor"
VARIANT_ARCH = "Architecture"
VARIANT_INSTALLER = "Installer"
VARIANT_PLATFORM = "Platform"
VARIANT_NETWORK = "Network"
VARIANT_NETWORK_STACK = "NetworkStack"
VARIANT_NETWORK_ACCESS = "NetworkAccess"
VARIANT_OWNER = "Owner"
VARIANT_TOPOLOGY = "Topology"
VARIANT_SUITE = "Suite"
VARIANT_UPGRADE = "Upgrade"
VARIANT_AGGREGATION = "Aggregation"
VARIANT_SECURITY_MODE = "SecurityMode"
VARIANT_FEATURE_SET = "FeatureSet"
VARIANT_SCHEDULER = "Scheduler"
VARIANT_CONTAINER_RUNTIME = "ContainerRuntime"
VARIANT_CGROUP_MODE = "CGroupMode"

# Reserved placeholder: "not applicable / not determined", distinct from a missing key.
VARIANT_DEFAULT_VALUE = "default"

RELEASE_DIMENSIONS = (
    VARIANT_RELEASE,
    VARIANT_RELEASE_MAJOR,
    VARIANT_RELEASE_MINOR,
    VARIANT_FROM_RELEASE,
    VARIANT_FROM_RELEASE_MAJOR,
    VARIANT_FROM_RELEASE_MINOR,
)

ALL_DIMENSIONS = RELEASE_DIMENSIONS + (
    VARIANT_ARCH,
    VARIANT_INSTALLER,
    VARIANT_PLATFORM,
    VARIANT_NETWORK,
    VARIANT_NETWORK_STACK,
    VARIANT_NETWORK_ACCESS,
    VARIANT_OWNER,
    VARIANT_TOPOLOGY,
    VARIANT_SUITE,
    VARIANT_UPGRADE,
    VARIANT_AGGREGATION,
    VARIANT_SECURITY_MODE,
    VARIANT_FEATURE_SET,
    VARIANT_SCHEDULER,
    VARIANT_CONTAINER_RUNTIME,
    VARIANT_CGROUP_MODE,
)

# Dimensions that may legitimately be missing from a job's variant map.
OPTIONAL_DIMENSIONS = frozenset(RELEASE_DIMENSIONS + (VARIANT_PLATFORM, VARIANT_NETWORK))

# Fallbacks applied after name rules and overrides. Network is handled
# separately because its default depends on the resolved release.
DIMENSION_DEFAULTS = {
    VARIANT_ARCH: "amd64",
    VARIANT_INSTALLER: "ipi",
    VARIANT_NETWORK_STACK: "ipv4",
    VARIANT_NETWORK_ACCESS: VARIANT_DEFAULT_VALUE,
    VARIANT_OWNER: "eng",
    VARIANT_TOPOLOGY: "ha",
    VARIANT_SUITE: "unknown",
    VARIANT_UPGRADE: "none",
    VARIANT_AGGREGATION: "none",
    VARIANT_SECURITY_MODE: VARIANT_DEFAULT_VALUE,
    VARIANT_FEATURE_SET: VARIANT_DEFAULT_VALUE,
    VARIANT_SCHEDULER: VARIANT_DEFAULT_VALUE,
    VARIANT_CONTAINER_RUNTIME: "runc",
    VARIANT_CGROUP_MODE: "v2",
}

# Keys found in variant override files that never make it into the registry.
IGNORED_OVERRIDE_KEYS = frozenset({"CloudRegion", "CloudZone"})
