from .explainer import Explainer
from .result import SurvResult
from . import models
from .explanations import (
    SurvGradient,
    SurvIntHessian,
    attribute_gradient,
    attribute_integrated_hessian,
)

__version__ = "0.1.0"
