"""Events inside nested spans that stay entered until the end of the script."""

import taskscope
from taskscope import Level

taskscope.init()

taskscope.info("a message")
span1 = taskscope.span("span.info", mog=4, gom="cow")
span1.enter()
taskscope.debug("my message", field="value")
span2 = taskscope.span("span.trace", level=Level.TRACE)
span2.enter()
taskscope.error(field="only one")

span2.exit()
span2.close()
span1.exit()
span1.close()
