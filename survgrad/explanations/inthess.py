from .base_explainer import BaseSurvMethod
from .grid import hessian_grid
from .reference import resolve_reference
from ..utils.checks import check_count
from ..utils.registry import Registry


@Registry.register_method("Surv_IntHessian")
class SurvIntHessian(BaseSurvMethod):
    """
    Integrated Hessians (Janizek et al., 2021) for survival targets.

    The path from the reference x' to the instance x is reparameterised
    bilinearly, x' + a*b*(x - x'), with a and b on an n x n grid over
    (0, 1]. At each grid point the gradient of the target at every timepoint
    is weighted by a*b; the weighted sum is divided by the n * n cells.

    Args:
        n: grid resolution per axis; n * n forward/backward rows per instance.
        x_ref: reference input, one array per input modality, shaped like a
            single instance or with a leading axis of length 1 or
            len(instance). Defaults to the feature means of the stored data.
    """
    name = "Surv_IntHessian"
    second_order = True

    def __init__(self, target="survival", times_input=True, batch_size=50, n=10,
                 x_ref=None, dtype="float", include_time=False, verbose=False):
        super().__init__(target=target, times_input=times_input, batch_size=batch_size,
                         dtype=dtype, include_time=include_time, verbose=verbose)
        self.n = check_count(n, "n")
        self.x_ref = x_ref

    def _grid(self):
        return hessian_grid(self.n * self.n)

    def _reference(self, explainer, n_instances):
        return resolve_reference(explainer.input_data, self.x_ref, n_instances)

    def _method_args(self, instance):
        args = super()._method_args(instance)
        args["n"] = self.n
        return args


def attribute_integrated_hessian(explainer, target="survival", instance=1, times_input=True,
                                 batch_size=50, n=10, x_ref=None, dtype="float",
                                 include_time=False, verbose=False):
    """Functional shortcut for ``SurvIntHessian(...).explain(explainer, instance)``."""
    method = SurvIntHessian(target=target, times_input=times_input, batch_size=batch_size, n=n,
                            x_ref=x_ref, dtype=dtype, include_time=include_time, verbose=verbose)
    return method.explain(explainer, instance=instance)
