"""
Frame level behaviour: the instruction budget, timers, sound, presenting the
framebuffer, the key wait state machine and faults stopping a frame.
"""

import threading

import pytest

from chip8emu.cpu import Interpreter, RunState
from chip8emu.display import Display
from chip8emu.errors import ProgramLoadError, UnknownOpcodeFault
from chip8emu.keypad import Keypad
from chip8emu.sound import Tone


class TestEndToEnd:
    def test_set_then_add(self, cpu):
        """6005 7003 leaves V0 = 8 and VF alone."""
        cpu.load_program(bytes([0x60, 0x05, 0x70, 0x03]))
        cpu.run_one_frame()
        assert cpu.V[0] == 0x08
        assert cpu.V[0xF] == 0

    def test_clear_and_draw_full_byte(self, cpu):
        cpu.load_program(bytes([
            0x00, 0xE0,  # CLS
            0xA2, 0x0A,  # I = 0x20A
            0x60, 0x00,  # V0 = 0
            0x61, 0x00,  # V1 = 0
            0xD0, 0x11,  # DRW V0, V1, 1
            0xFF,        # sprite
        ]))
        cpu.speed = 5
        cpu.run_one_frame()
        display = cpu.framebuffer
        assert [display.pixel(x, 0) for x in range(8)] == [1] * 8
        assert display.lit_count() == 8
        assert cpu.V[0xF] == 0
        assert display.frames_presented == 1

    def test_load_program_keeps_registers(self, cpu):
        cpu.V[5] = 9
        cpu.delay_timer = 4
        cpu.load_program(bytes([0x12, 0x00]))
        assert cpu.V[5] == 9
        assert cpu.delay_timer == 4

    def test_load_program_rejects_empty(self, cpu):
        with pytest.raises(ProgramLoadError):
            cpu.load_program(b"")

    def test_load_rom_from_file(self, cpu, tmp_path):
        rom = tmp_path / "add.ch8"
        rom.write_bytes(bytes([0x60, 0x05, 0x70, 0x03]))
        assert cpu.load_rom(rom) == 4
        cpu.run_one_frame()
        assert cpu.V[0] == 8


class TestFrameBudget:
    def test_runs_speed_instructions(self):
        cpu = Interpreter(Display(), Keypad(), Tone(), speed=3)
        cpu.memory.write(0x200, 0x70)
        cpu.memory.write(0x201, 0x01)
        cpu.memory.write(0x202, 0x70)
        cpu.memory.write(0x203, 0x01)
        cpu.memory.write(0x204, 0x70)
        cpu.memory.write(0x205, 0x01)
        cpu.memory.write(0x206, 0x70)
        cpu.memory.write(0x207, 0x01)
        cpu.run_one_frame()
        assert cpu.V[0] == 3
        assert cpu.pc == 0x206

    def test_default_speed_is_ten(self, cpu, load):
        load(0x1200)  # spin in place
        cpu.run_one_frame()
        assert cpu.speed == 10
        assert cpu.pc == 0x200

    def test_present_once_per_frame(self, cpu, load):
        load(0x1200)
        for _ in range(3):
            cpu.run_one_frame()
        assert cpu.framebuffer.frames_presented == 3
        assert cpu.framebuffer.should_draw


class TestTimers:
    def test_delay_timer_counts_down_once_per_frame(self, cpu, load):
        load(0x1200)
        cpu.delay_timer = 3
        cpu.run_one_frame()
        assert cpu.delay_timer == 2
        cpu.run_one_frame()
        cpu.run_one_frame()
        cpu.run_one_frame()
        assert cpu.delay_timer == 0

    def test_tone_follows_sound_timer(self, cpu, load):
        load(0x6A02, 0xFA18, 0x1204)
        cpu.run_one_frame()
        assert cpu.sound_timer == 1
        assert cpu.tone.playing
        assert cpu.tone.frequency == 440
        cpu.run_one_frame()
        assert cpu.sound_timer == 0
        assert not cpu.tone.playing

    def test_tone_started_once_while_timer_runs(self, cpu, load):
        load(0x6A05, 0xFA18, 0x1204)
        for _ in range(3):
            cpu.run_one_frame()
        assert cpu.tone.starts == 1


class TestWaitForKeyFrames:
    def setup_program(self, cpu, load):
        load(0xF30A, 0x6001, 0x1204)
        cpu.delay_timer = 5

    def test_wait_blocks_rest_of_frame(self, cpu, load):
        self.setup_program(cpu, load)
        cpu.run_one_frame()
        assert cpu.run_state is RunState.WAITING_FOR_KEY
        assert cpu.pc == 0x202
        assert cpu.V[0] == 0
        assert cpu.delay_timer == 5
        assert cpu.framebuffer.frames_presented == 0

    def test_nothing_runs_while_waiting(self, cpu, load):
        self.setup_program(cpu, load)
        for _ in range(5):
            cpu.run_one_frame()
        assert cpu.pc == 0x202
        assert cpu.delay_timer == 5
        assert cpu.framebuffer.frames_presented == 0
        assert cpu.tone.starts == 0

    def test_resumes_after_key(self, cpu, load):
        self.setup_program(cpu, load)
        cpu.run_one_frame()
        cpu.keypad.press(0x7)
        assert cpu.V[3] == 0x7
        assert cpu.run_state is RunState.RUNNING
        cpu.run_one_frame()
        assert cpu.V[0] == 1
        assert cpu.delay_timer == 4
        assert cpu.framebuffer.frames_presented == 1

    def test_key_from_another_thread(self, cpu, load):
        self.setup_program(cpu, load)
        cpu.run_one_frame()
        worker = threading.Thread(target=cpu.keypad.press, args=(0xE,))
        worker.start()
        worker.join()
        assert cpu.V[3] == 0xE
        assert not cpu.paused


class TestFaults:
    def test_unknown_opcode_stops_frame(self, cpu, load):
        load(0x6001, 0x5121, 0x6002)
        with pytest.raises(UnknownOpcodeFault) as info:
            cpu.run_one_frame()
        assert info.value.opcode == 0x5121
        assert info.value.pc == 0x202
        assert cpu.V[0] == 1
        assert cpu.halted
        assert cpu.fault is info.value
        assert cpu.framebuffer.frames_presented == 0

    def test_halted_interpreter_does_nothing(self, cpu, load):
        load(0x8008)
        with pytest.raises(UnknownOpcodeFault):
            cpu.run_one_frame()
        pc = cpu.pc
        cpu.run_one_frame()
        assert cpu.pc == pc
        assert cpu.framebuffer.frames_presented == 0

    def test_reset_clears_fault(self, cpu, load):
        load(0x8008)
        with pytest.raises(UnknownOpcodeFault):
            cpu.run_one_frame()
        cpu.reset()
        assert cpu.run_state is RunState.RUNNING
        assert cpu.fault is None
        assert cpu.pc == 0x200
        assert cpu.memory.read(0x200) == 0
        assert cpu.memory.read(0) == 0xF0


class TestState:
    def test_snapshot(self, cpu, load):
        load(0x6A12, 0xA321, 0x2300)
        load(0xF50A, at=0x300)
        cpu.run_one_frame()
        state = cpu.state()
        assert state["pc"] == 0x302
        assert state["I"] == 0x321
        assert state["V"][0xA] == 0x12
        assert state["stack"] == [0x206]
        assert state["run_state"] == "waiting for key"
        assert state["key_register"] == 5
