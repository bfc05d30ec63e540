from rowstream.data.api import *
from rowstream.data.config import *
from rowstream.data.connection import *
from rowstream.data.context import *
from rowstream.data.db_config import *
from rowstream.data.error import *
from rowstream.data.pool import *
from rowstream.data.row import *
