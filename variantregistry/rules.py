"""Token tables used to derive variants from CI job names.

Job names are lower-cased and split on '-' into tokens. Each table below is an
ordered tuple of (triggers, value) pairs; the first pair with a matching
trigger wins. A trigger is either a single token ("ovn") or a dash-joined
phrase ("single-node") that must appear as consecutive tokens.
"""
from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

Rule = Tuple[Tuple[str, ...], str]

SPLIT_CHARS = re.compile(r"-+")
RELEASE_TOKEN_RE = re.compile(r"^(\d+)\.(\d+)$")

# Releases before this default to openshift-sdn when the name has no network token.
OVN_DEFAULT_SINCE = (4, 12)

UPGRADE_TRIGGERS = ("upgrade",)
DOWNGRADE_TRIGGERS = ("upgrade-out-of-change", "downgrade")

# multi-<x>-<y> suffixes used by the multiarch jobs; both letters must agree
# for the payload to be a single architecture.
MULTI_ARCH_MARKER = "multi"
MULTI_ARCH_LETTERS = {
    "a": "arm64",
    "p": "ppc64le",
    "z": "s390x",
    "x": "amd64",
}
HETEROGENEOUS = "heterogeneous"

ARCH_RULES: Tuple[Rule, ...] = (
    (("heterogeneous",), HETEROGENEOUS),
    (("arm64", "aarch64", "arm"), "arm64"),
    (("ppc64le", "ppc64", "power"), "ppc64le"),
    (("s390x",), "s390x"),
    (("amd64", "x86", "x86_64"), "amd64"),
)

INSTALLER_RULES: Tuple[Rule, ...] = (
    (("hypershift",), "hypershift"),
    (("rosa",), "rosa"),
    (("assisted",), "assisted"),
    (("agent",), "agent"),
    (("upi",), "upi"),
    (("ipi",), "ipi"),
)

# No powervs entry: those jobs carry no platform variant.
PLATFORM_RULES: Tuple[Rule, ...] = (
    (("rosa",), "rosa"),
    (("aws",), "aws"),
    (("azure",), "azure"),
    (("gcp",), "gcp"),
    (("vsphere",), "vsphere"),
    (("metal", "baremetal"), "metal"),
    (("openstack",), "openstack"),
    (("ovirt",), "ovirt"),
    (("libvirt",), "libvirt"),
    (("nutanix",), "nutanix"),
    (("alibaba",), "alibaba"),
    (("ibmcloud",), "ibmcloud"),
)

NETWORK_RULES: Tuple[Rule, ...] = (
    (("ovn",), "ovn"),
    (("sdn",), "sdn"),
)

NETWORK_STACK_RULES: Tuple[Rule, ...] = (
    (("dualstack", "dual"), "dual"),
    (("ipv6",), "ipv6"),
)

NETWORK_ACCESS_RULES: Tuple[Rule, ...] = (
    (("proxy",), "proxy"),
    (("disconnected",), "disconnected"),
)

OWNER_RULES: Tuple[Rule, ...] = (
    (("osde2e",), "service-delivery"),
    (("perfscale",), "perfscale"),
    (("telco5g", "cnf"), "cnf"),
)

# hypershift clusters run with an external control plane
TOPOLOGY_RULES: Tuple[Rule, ...] = (
    (("single-node", "sno"), "single"),
    (("external", "hypershift"), "external"),
)

SUITE_RULES: Tuple[Rule, ...] = (
    (("serial",), "serial"),
    (("parallel", "conformance"), "parallel"),
)

SECURITY_MODE_RULES: Tuple[Rule, ...] = (
    (("fips",), "fips"),
)

CONTAINER_RUNTIME_RULES: Tuple[Rule, ...] = (
    (("crun",), "crun"),
)

CGROUP_MODE_RULES: Tuple[Rule, ...] = (
    (("cgroupsv1",), "v1"),
)


def tokenize(job_name: str) -> List[str]:
    return [t for t in SPLIT_CHARS.split((job_name or "").lower()) if t]


def has_phrase(tokens: Sequence[str], phrase: str) -> bool:
    """True if the dash-joined phrase occurs as consecutive tokens."""
    words = [w for w in phrase.split("-") if w]
    if not words:
        return False
    n = len(words)
    for i in range(len(tokens) - n + 1):
        if list(tokens[i:i + n]) == words:
            return True
    return False


def matches_any(tokens: Sequence[str], triggers: Sequence[str]) -> bool:
    tok_set = set(tokens)
    for trigger in triggers:
        if "-" in trigger:
            if has_phrase(tokens, trigger):
                return True
        elif trigger in tok_set:
            return True
    return False


def first_match(tokens: Sequence[str], rules: Sequence[Rule]) -> Optional[str]:
    for triggers, value in rules:
        if matches_any(tokens, triggers):
            return value
    return None


def parse_version(value: str) -> Optional[Tuple[int, int]]:
    m = RELEASE_TOKEN_RE.match((value or "").strip())
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def extract_releases(tokens: Sequence[str]) -> List[str]:
    """Distinct <major>.<minor> tokens in the name, lowest version first."""
    seen = {}
    for tok in tokens:
        ver = parse_version(tok)
        if ver is not None and ver not in seen:
            seen[ver] = f"{ver[0]}.{ver[1]}"
    return [seen[v] for v in sorted(seen)]


def multi_arch_suffix(tokens: Sequence[str]) -> Optional[List[str]]:
    """The two letters after 'multi' in a multi-<x>-<y> name, if present."""
    for i, tok in enumerate(tokens):
        if tok != MULTI_ARCH_MARKER:
            continue
        suffix = list(tokens[i + 1:i + 3])
        if len(suffix) == 2 and all(t.isalpha() and len(t) <= 2 for t in suffix):
            return suffix
    return None


def detect_architecture(tokens: Sequence[str]) -> Optional[str]:
    suffix = multi_arch_suffix(tokens)
    if suffix is not None:
        if suffix[0] == suffix[1] and suffix[0] in MULTI_ARCH_LETTERS:
            return MULTI_ARCH_LETTERS[suffix[0]]
        return HETEROGENEOUS
    return first_match(tokens, ARCH_RULES)


def default_network(release: Optional[str]) -> Optional[str]:
    ver = parse_version(release or "")
    if ver is None:
        return None
    return "sdn" if ver < OVN_DEFAULT_SINCE else "ovn"
