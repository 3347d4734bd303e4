from .aggregate import gather as gather
from .aggregate import gather_map as gather_map
from .aggregate import race as race
from .call import call as call
from .coio import Coio as Coio
from .driver import Driver as Driver
from .driver import drive as drive
from .driver import run as run
from .errors import RoutineExhausted as RoutineExhausted
from .errors import UnsupportedYieldType as UnsupportedYieldType
from .pause import pause as pause
from .registry import routine as routine
from .result import Err as Err
from .result import Ok as Ok
