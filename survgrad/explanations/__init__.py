# Import method modules so their @Registry decorators run on startup.
from .base_explainer import BaseSurvMethod
from .grad import SurvGradient, attribute_gradient
from .inthess import SurvIntHessian, attribute_integrated_hessian
