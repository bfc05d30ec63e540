from rowstream.adapter import config, fs, pool
from rowstream.adapter.check import *
from rowstream.adapter.context import *
from rowstream.adapter.error_format import *
