import logging
import platform
import re
from typing import Dict, List, Optional

from piston.schemas import Rule

logger = logging.getLogger(__name__)

# OS and architecture names as used in descriptor rules
CURRENT_OS = {
    "Linux": "linux",
    "Windows": "windows",
    "Darwin": "osx",
    "FreeBSD": "freebsd",
}.get(platform.system())

CURRENT_ARCH = {
    "i386": "x86",
    "i686": "x86",
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "arm64": "arm64",
    "aarch64": "arm64",
}.get(platform.machine().lower())


def _os_matches(rule: Rule, os_name: Optional[str], arch: Optional[str], os_version: str) -> bool:
    if rule.os is None:
        return True
    if rule.os.name is not None and rule.os.name != os_name:
        return False
    if rule.os.arch is not None and rule.os.arch != arch:
        return False
    if rule.os.version is not None:
        try:
            if re.search(rule.os.version, os_version) is None:
                return False
        except re.error as e:
            logger.warning(f"Ignoring rule with invalid os.version pattern {rule.os.version!r}: {e}")
            return False
    return True


def rules_allow(
    rules: Optional[List[Rule]],
    os_name: Optional[str] = None,
    arch: Optional[str] = None,
    features: Optional[Dict[str, bool]] = None,
    os_version: Optional[str] = None,
) -> bool:
    """
    Evaluates a library's rule list.

    No rules means allowed. Otherwise start from disallowed and let every
    matching rule overwrite the outcome with its action.
    """
    if not rules:
        return True

    os_name = os_name if os_name is not None else CURRENT_OS
    arch = arch if arch is not None else CURRENT_ARCH
    os_version = os_version if os_version is not None else platform.version()
    features = features or {}

    allowed = False
    for rule in rules:
        if not _os_matches(rule, os_name, arch, os_version):
            continue
        if rule.features and any(features.get(k) != v for k, v in rule.features.items()):
            continue
        allowed = rule.action == "allow"
    return allowed
