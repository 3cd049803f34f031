"""taskscope Quick Start: minimal example to get output on the console."""

import taskscope

# 1. Initialize: everything from here on is written to stdout
taskscope.init()

# 2. Events outside any span
taskscope.info("a message")
taskscope.debug("my message", field="value")

# 3. Spans show up as a prefix on everything inside them
with taskscope.span("load-config", path="settings.toml"):
    taskscope.info("reading")

    with taskscope.span("parse"):
        taskscope.warn("deprecated key", key="timeout")

# 4. Shutdown
taskscope.shutdown()
