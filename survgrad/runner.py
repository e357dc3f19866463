from __future__ import annotations
import json
import os
import pickle
import time
from typing import Any, Dict, List

import yaml

from .explainer import Explainer
from .utils.logging_utils import ensure_dir, get_logger
from .utils.path_utils import method_signature
from .utils.registry import Registry
from . import explanations  # noqa: F401  (populate the method registry)

log = get_logger()


def dump_json(obj: Dict[str, Any], path: str):
    with open(path, "w") as f:
        json.dump(obj, f, indent=2, sort_keys=True)


class AttributionRunner:
    """
    Run the attribution methods listed in a YAML config on a saved explainer.

    Config layout:
        explainer: path/to/explainer.pt
        output_dir: runs
        methods:
          - name: Surv_Gradient
            params: {target: survival, instance: [1, 3, 4]}
          - Surv_IntHessian            # defaults only
    """
    def __init__(self, config_path):
        with open(config_path, 'r') as f:
            self.cfg = yaml.safe_load(f) or {}
        if "explainer" not in self.cfg:
            raise ValueError(f"{config_path}: missing 'explainer' (path of a saved Explainer)")
        if not self.cfg.get("methods"):
            raise ValueError(f"{config_path}: 'methods' must list at least one attribution method")

    def _build_methods(self):
        methods = []
        for item in self.cfg['methods']:
            if isinstance(item, dict):
                name = item.get('name')
                params = dict(item.get('params', {}) or {})
            else:
                # fallback if only a method name is given
                name, params = item, {}
            instance = params.pop('instance', 1)
            cls = Registry.get_method(name)
            methods.append((cls(**params), instance))
        return methods

    def run(self) -> List[Dict[str, Any]]:
        log.info("⚙️  Loading explainer from %s…", self.cfg['explainer'])
        explainer = Explainer.load(self.cfg['explainer'])
        methods = self._build_methods()

        outdir = os.path.join(self.cfg.get('output_dir', 'runs'), explainer.model_class)
        ensure_dir(outdir)

        rows = []
        for method, instance in methods:
            mdir_rel, _ = method_signature(method, extra={"instance": instance})
            mdir = os.path.join(outdir, mdir_rel)
            ensure_dir(mdir)

            t0 = time.time()
            result = method.explain(explainer, instance=instance)
            elapsed = time.time() - t0

            with open(os.path.join(mdir, "result.pkl"), "wb") as f:
                pickle.dump(result.to_dict(), f, protocol=pickle.HIGHEST_PROTOCOL)
            dump_json({"explainer": str(self.cfg['explainer']),
                       "model_class": explainer.model_class,
                       "method": method.name,
                       "method_args": dict(result.method_args)},
                      os.path.join(mdir, "config.json"))
            log.info("     • Saved %s result to %s (%.2fs)", method.name, mdir, elapsed)

            rows.append({"method": method.name, "dir": mdir, "seconds": elapsed,
                         "res_shapes": [list(r.shape) for r in result.res]})

        log.info("📄 Attribution run complete. %d result(s).", len(rows))
        return rows
