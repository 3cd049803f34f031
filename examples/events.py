"""One event per level, with and without fields."""

import taskscope

taskscope.init()

taskscope.trace("This is way too verbose")
taskscope.debug("my message", field="value")
taskscope.info("a message")
taskscope.warn("warn me!")
taskscope.error(field="only one")
