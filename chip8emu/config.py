# ---- Configuration ----
scale = 10
width, height = 64, 32
window_width, window_height = width * scale, height * scale

# the window calls run_one_frame() at frame_hz; speed is instructions per frame
frame_hz = 60
speed = 10
tone_hz = 440

memory_size = 4096      # max 4096 bytes
program_start = 0x200   # offset is equal to 0x200 (Cogwood's reference)
stack_depth = 16

#make it true if you want the logs
logs_on = False


def set_logging(enabled):
    global logs_on
    logs_on = bool(enabled)


def log(*args):
    if logs_on:
        print(*args)
