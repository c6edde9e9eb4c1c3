"""Runtime support for generated parameter accessors."""

from .content import ContentError as ContentError
from .content import IndexOutOfRange as IndexOutOfRange
from .content import ParamAccessor as ParamAccessor
from .types import Maybe as Maybe
