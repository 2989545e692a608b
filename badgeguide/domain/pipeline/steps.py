from enum import Enum
from typing import Dict, FrozenSet

class GenerationStep(str, Enum):
    IDLE = "IDLE"
    SEARCHING = "SEARCHING"
    GALLERY = "GALLERY"      # selección interactiva de badges
    THINKING = "THINKING"
    WRITING = "WRITING"
    DRAWING = "DRAWING"
    DONE = "DONE"

class InvalidTransition(Exception):
    def __init__(self, current: GenerationStep, target: GenerationStep):
        super().__init__(f"transición inválida: {current.value} -> {target.value}")
        self.current = current
        self.target = target

S = GenerationStep

# Tabla explícita de transiciones. Cualquier otra combinación es un error.
TRANSITIONS: Dict[GenerationStep, FrozenSet[GenerationStep]] = {
    S.IDLE:      frozenset({S.SEARCHING, S.DRAWING, S.THINKING}),
    S.SEARCHING: frozenset({S.GALLERY, S.DRAWING, S.THINKING, S.IDLE, S.DONE}),
    S.GALLERY:   frozenset({S.DRAWING, S.THINKING, S.IDLE}),
    S.DRAWING:   frozenset({S.THINKING, S.DONE}),
    S.THINKING:  frozenset({S.WRITING, S.DONE}),
    S.WRITING:   frozenset({S.DONE}),
    S.DONE:      frozenset({S.SEARCHING, S.DRAWING, S.THINKING, S.IDLE}),
}

# Pasos con una llamada externa en curso
RUNNING_STEPS = frozenset({S.SEARCHING, S.DRAWING, S.THINKING, S.WRITING})

STATUS_MESSAGES = {
    S.IDLE: "Ready",
    S.SEARCHING: "Scanning GitHub achievements...",
    S.GALLERY: "Scan complete. Curate your badges.",
    S.DRAWING: "Drawing hero image...",
    S.THINKING: "Thinking about structure...",
    S.WRITING: "Writing README...",
    S.DONE: "Done",
}

def can_transition(current: GenerationStep, target: GenerationStep) -> bool:
    return target in TRANSITIONS[current]

def check_transition(current: GenerationStep, target: GenerationStep) -> GenerationStep:
    if not can_transition(current, target):
        raise InvalidTransition(current, target)
    return target

def is_generating(step: GenerationStep) -> bool:
    return step in RUNNING_STEPS

def progress_for(step: GenerationStep) -> int:
    """Porcentaje de la barra de estado: 25 buscando, 50 pensando, 75 escribiendo."""
    if step is S.DONE:
        return 100
    if not is_generating(step):
        return 0
    if step is S.SEARCHING:
        return 25
    if step is S.THINKING:
        return 50
    if step is S.WRITING:
        return 75
    return 100
