from abc import ABC, abstractmethod
import copy
import time
from typing import Any, Dict, List

import numpy as np
import torch

from .base_method import base_method
from .grid import IntegrationGrid
from .reference import replicate_reference
from .. import models  # noqa: F401  (populate the adapter registry)
from ..explainer import Explainer
from ..result import SurvResult
from ..utils.checks import check_choice, check_count, check_flag, check_instance
from ..utils.logging_utils import get_logger
from ..utils.precision import model_precision, resolve_dtype
from ..utils.registry import Registry

log = get_logger()


def _shape(x):
    try:
        return tuple(x.shape)
    except Exception:
        return "N/A"


class BaseSurvMethod(ABC):
    """
    Common driver of the survival attribution methods.

    Scalar options are validated on construction; the explainer-dependent
    ones (target, instance, reference) at the start of `explain`, before the
    model is evaluated.
    """
    name = "BaseSurvMethod"
    second_order = False

    def __init__(self, target="survival", times_input=False, batch_size=1000,
                 dtype="float", include_time=False, verbose=False):
        if not isinstance(target, str):
            raise ValueError(f"'target' must be a string naming the explained output, got {target!r}")
        self.target = target
        self.times_input = check_flag(times_input, "times_input")
        self.batch_size = check_count(batch_size, "batch_size")
        resolve_dtype(dtype)
        self.dtype = dtype
        self.include_time = check_flag(include_time, "include_time")
        self.verbose = check_flag(verbose, "verbose")

    # ------------------------------------------------------------------
    @abstractmethod
    def _grid(self) -> IntegrationGrid:
        ...

    @abstractmethod
    def _reference(self, explainer: Explainer, n_instances: int) -> List[np.ndarray]:
        """Per-modality reference rows of shape (1 or n_instances, features...)."""
        ...

    def _adapter_options(self) -> Dict[str, Any]:
        return {"include_time": self.include_time}

    def _method_args(self, instance) -> Dict[str, Any]:
        return {
            "target": self.target,
            "instance": list(instance),
            "times_input": self.times_input,
            "batch_size": self.batch_size,
            "include_time": self.include_time,
            "dtype": self.dtype,
        }

    # ------------------------------------------------------------------
    def explain(self, explainer: Explainer, instance=1) -> SurvResult:
        """
        Attribute the target curve of the selected (1-based) instances.

        Returns a SurvResult whose `res[m]` has shape
        (len(instance), features of input m, T) and `pred` (len(instance), T).
        """
        if not isinstance(explainer, Explainer):
            raise TypeError(f"'explainer' must be a survgrad.Explainer, got {type(explainer).__name__}")
        adapter_cls = Registry.get_model(explainer.model_class)
        check_choice(self.target, adapter_cls.targets, "target")
        instance = check_instance(instance, explainer.n_instances)
        refs = self._reference(explainer, len(instance))
        grid = self._grid()

        refs = replicate_reference(refs, len(instance), grid.n_grid)

        dtype = resolve_dtype(self.dtype)
        # private copy: the explainer's network is shared between calls
        net = copy.deepcopy(explainer.torch_module())
        param = next(net.parameters(), None)
        device = param.device if param is not None else torch.device("cpu")

        log.info("▶ %s [%s, target=%s]: %d instance(s) x %d grid point(s), %d timepoint(s)",
                 self.name, explainer.model_class, self.target, len(instance), grid.n_grid,
                 len(explainer.time))
        t0 = time.time()
        with model_precision(net, dtype):
            adapter = adapter_cls.from_explainer(explainer, self.target, dtype, device, net=net,
                                                 **self._adapter_options())
            data = [torch.tensor(x, dtype=dtype, device=device) for x in explainer.input_data]
            inputs_ref = [torch.tensor(r, dtype=dtype, device=device) for r in refs]
            res, pred = base_method(adapter, data, [i - 1 for i in instance], grid, inputs_ref,
                                    batch_size=self.batch_size,
                                    times_input=self.times_input,
                                    second_order=self.second_order,
                                    verbose=self.verbose)

        result = self._assemble(explainer, instance, res, pred)
        log.info("  • %s done in %.2fs; res shape(s) %s, pred shape %s", self.name, time.time() - t0,
                 ", ".join(str(_shape(r)) for r in result.res), _shape(result.pred))
        return result

    def _assemble(self, explainer, instance, res, pred) -> SurvResult:
        return SurvResult(
            res=tuple(r.detach().cpu().numpy() for r in res),
            pred=pred.detach().cpu().numpy(),
            time=np.asarray(explainer.time),
            method=self.name,
            method_args=self._method_args(instance),
            model_class=explainer.model_class,
            competing_risks=False,
        )
