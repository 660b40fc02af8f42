from chip8.shell.services.machine_factory import MachineFactory
from chip8.shell.services.program_loader import ProgramLoader

__all__ = ["MachineFactory", "ProgramLoader"]
