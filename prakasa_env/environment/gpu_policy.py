"""
GPU compatibility policy.

Decides whether a GPU, given only its marketing name, is powerful enough to
run the inference workload. Parsing and policy are separate so that each can
be tested on its own:

- parse_gpu_name: 'NVIDIA GeForce RTX 3060 Ti' -> RTXModel(30, 60, 'TI')
- is_acceptable_gpu: the accept/reject decision, a pure str -> bool mapping
- matched_rule: which rule decided, for the component's debug log

Rules, first match wins:
1. Professional and data center families are accepted.
2. Consumer RTX cards: series 50 and newer accepted; series 40 from model 60;
   series 30 above model 60, or model 60 with a Ti suffix; series 20 and
   older rejected.
3. GTX cards are rejected.
4. Anything else is rejected.
"""

import re
from dataclasses import dataclass
from typing import Optional

PROFESSIONAL_GPU_TOKENS = (
    "TESLA", "QUADRO RTX", "RTX A", "A100", "H100",
    "A40", "A30", "A10", "V100", "P100",
)

# Series digits are greedy, the model keeps the last two or three digits
RTX_PATTERN = re.compile(r"RTX\s*(\d+)(\d{2,3})(?:\s*(TI|SUPER))?", re.IGNORECASE)

BLACKWELL_MIN_SERIES = 50


@dataclass(frozen=True)
class RTXModel:
    series: int
    model: int
    suffix: str = ""


def parse_gpu_name(gpu_name: str) -> Optional[RTXModel]:
    """Extract series, model and suffix from a consumer RTX name.

    Returns:
        RTXModel, or None when the name has no RTX model number.

    Example:
        >>> parse_gpu_name("NVIDIA GeForce RTX 3060 Ti")
        RTXModel(series=30, model=60, suffix='TI')
        >>> parse_gpu_name("NVIDIA GeForce GTX 1660") is None
        True
    """
    match = RTX_PATTERN.search(gpu_name or "")
    if match is None:
        return None
    return RTXModel(
        series=int(match.group(1)),
        model=int(match.group(2)),
        suffix=(match.group(3) or "").upper(),
    )


def is_professional_gpu(gpu_name: str) -> bool:
    upper = (gpu_name or "").upper()
    return any(token in upper for token in PROFESSIONAL_GPU_TOKENS)


def _rtx_verdict(parsed: RTXModel) -> Optional[bool]:
    """Policy table for consumer RTX cards. None means no rule applies."""
    if parsed.series >= 50:
        return True
    if parsed.series == 40:
        return parsed.model >= 60
    if parsed.series == 30:
        if parsed.model > 60:
            return True
        if parsed.model == 60:
            return "TI" in parsed.suffix
        return False
    if parsed.series <= 20:
        return False
    return None


def matched_rule(gpu_name: str) -> str:
    """Name the policy rule that decides ``gpu_name``, for diagnostics."""
    upper = (gpu_name or "").upper()
    if is_professional_gpu(upper):
        return "professional/data center card"
    if "GEFORCE" in upper or "RTX" in upper:
        parsed = parse_gpu_name(upper)
        if parsed is not None and _rtx_verdict(parsed) is not None:
            return f"consumer RTX series {parsed.series} model {parsed.model} {parsed.suffix}".rstrip()
    if "GTX" in upper:
        return "GTX series"
    return "unrecognized"


def is_acceptable_gpu(gpu_name: str) -> bool:
    """Return True when the named GPU meets the minimum requirement.

    Example:
        >>> is_acceptable_gpu("NVIDIA GeForce RTX 3060")
        False
        >>> is_acceptable_gpu("NVIDIA GeForce RTX 3060 Ti")
        True
    """
    upper = (gpu_name or "").upper()

    if is_professional_gpu(upper):
        return True

    if "GEFORCE" in upper or "RTX" in upper:
        parsed = parse_gpu_name(upper)
        if parsed is not None:
            verdict = _rtx_verdict(parsed)
            if verdict is not None:
                return verdict

    # GTX and unknown cards are rejected alike
    return False


def is_blackwell_gpu(gpu_name: str) -> bool:
    """RTX 50 series and newer use the Blackwell image, everything else the Hopper image."""
    parsed = parse_gpu_name(gpu_name)
    return parsed is not None and parsed.series >= BLACKWELL_MIN_SERIES
