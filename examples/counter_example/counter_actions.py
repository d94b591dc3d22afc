from fluxstore import create_action

# 定義 Actions
increment = create_action("increment")
decrement = create_action("decrement")
increment_by = create_action("incrementBy")
reset = create_action("reset")
