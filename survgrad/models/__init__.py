# Import adapter modules so their @Registry decorators run on startup.
from .base_model import BaseSurvModel, HazardSurvModel
from .coxtime import CoxTime
from .deepsurv import DeepSurv
from .deephit import DeepHit
