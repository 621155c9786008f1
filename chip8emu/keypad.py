from .interfaces import InputSource


class Keypad(InputSource):
    """State of the 16 key hex keypad, 1 while held and 0 once released."""

    def __init__(self):
        self.key_inputs = [0] * 16
        self.on_next_key_press = None

    def press(self, key):
        key &= 0xF
        self.key_inputs[key] = 1
        # one shot: clear before calling so the callback may register again
        callback, self.on_next_key_press = self.on_next_key_press, None
        if callback is not None:
            callback(key)

    def release(self, key):
        self.key_inputs[key & 0xF] = 0

    def is_pressed(self, key):
        # only 0x0..0xF exist, anything above is never held
        return 0 <= key <= 0xF and bool(self.key_inputs[key])

    def pressed_keys(self):
        return [k for k, down in enumerate(self.key_inputs) if down]

    def register_next_key_callback(self, callback):
        self.on_next_key_press = callback
