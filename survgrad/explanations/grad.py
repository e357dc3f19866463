from .base_explainer import BaseSurvMethod
from .grid import gradient_grid
from .reference import zero_reference
from ..utils.checks import check_flag
from ..utils.registry import Registry


@Registry.register_method("Surv_Gradient")
class SurvGradient(BaseSurvMethod):
    """
    Gradient saliency of a survival target over time.

    For every selected instance x and timepoint t the attribution is
    d target(t) / d x, optionally multiplied by x (`times_input`).
    """
    name = "Surv_Gradient"
    second_order = False

    def __init__(self, target="survival", times_input=False, use_base_hazard=True,
                 batch_size=1000, include_time=False, dtype="float", verbose=False):
        super().__init__(target=target, times_input=times_input, batch_size=batch_size,
                         dtype=dtype, include_time=include_time, verbose=verbose)
        self.use_base_hazard = check_flag(use_base_hazard, "use_base_hazard")

    def _grid(self):
        return gradient_grid()

    def _reference(self, explainer, n_instances):
        # alpha = 1 on a zero reference reproduces the instance exactly
        return zero_reference(explainer.input_data)

    def _adapter_options(self):
        return {"include_time": self.include_time, "use_base_hazard": self.use_base_hazard}

    def _method_args(self, instance):
        args = super()._method_args(instance)
        args["use_base_hazard"] = self.use_base_hazard
        return args


def attribute_gradient(explainer, target="survival", instance=1, times_input=False,
                       use_base_hazard=True, batch_size=1000, include_time=False,
                       dtype="float", verbose=False):
    """Functional shortcut for ``SurvGradient(...).explain(explainer, instance)``."""
    method = SurvGradient(target=target, times_input=times_input, use_base_hazard=use_base_hazard,
                          batch_size=batch_size, include_time=include_time, dtype=dtype,
                          verbose=verbose)
    return method.explain(explainer, instance=instance)
