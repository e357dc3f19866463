from __future__ import annotations
import re
from typing import Any, Dict, List, Tuple


def _sanitize(s: str) -> str:
    # file-system friendly
    s = re.sub(r"[^\w\-\.\=]+", "_", s.strip())
    s = re.sub(r"_+", "_", s).strip("_")
    return s or "x"


def _kv_str(d: Dict[str, Any], keys: List[str]) -> str:
    parts = []
    for k in sorted(keys):
        if k in d and d[k] is not None:
            v = d[k]
            if isinstance(v, float):
                v = f"{v:g}"
            elif isinstance(v, (list, tuple)):
                v = "-".join(str(x) for x in v)
            parts.append(f"{k}={v}")
    return ",".join(parts)


def method_signature(method, extra: Dict[str, Any] = None) -> Tuple[str, Dict[str, Any]]:
    """
    Return (dir_name, params) for an attribution method instance.
    Example: "Surv_IntHessian__batch_size=50,dtype=float,instance=1-2,n=5,..."
    """
    mname = getattr(method, "name", method.__class__.__name__)
    # pull simple numeric/string params from __dict__ (if any)
    p = {}
    for k, v in getattr(method, "__dict__", {}).items():
        if k == "verbose":
            continue
        if isinstance(v, (int, float, bool, str)):
            p[k] = v
    p.update(extra or {})
    key = _sanitize(mname)
    suffix = _kv_str(p, sorted(p.keys()))
    if suffix:
        key = f"{key}__{_sanitize(suffix)}"
    return key, p
