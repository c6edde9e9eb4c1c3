"""Parameter accessor generator."""

from .accessor import AccessorPlan as AccessorPlan
from .accessor import Regime as Regime
from .accessor import plan_accessor as plan_accessor
from .direct import build_content_type as build_content_type
from .direct import build_content_types as build_content_types
from .layout import FieldLayoutResolver as FieldLayoutResolver
from .layout import MessageLayout as MessageLayout
from .layout import resolve_layout as resolve_layout
from .mappers import MapperResolutionError as MapperResolutionError
from .parser import ValidationError as ValidationError
from .parser import load_schema as load_schema
from .parser import parse as parse
from .types import *
from .typespecs import TypeResolutionError as TypeResolutionError
