from rowstream.service.cursor_item import *
from rowstream.service.cursor_provider import *
from rowstream.service.export import *
