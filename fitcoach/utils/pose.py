# fitcoach/utils/pose.py
"""
Utilidades sobre keypoints de pose.

Formato de frame (el mismo que envía el cliente):
    {"keypoints": [{"x": 0.5, "y": 0.2, "visibility": 0.9}, ...], "timestamp": 33.3}

Coordenadas normalizadas (0-1). Se usan 13 landmarks, en este orden:
    0 cabeza, 1/2 hombros, 3/4 codos, 5/6 muñecas, 7/8 caderas,
    9/10 rodillas, 11/12 tobillos  (impar = izquierda, par = derecha)

Para los cálculos los frames se apilan en un array (frames, landmarks, 2);
los puntos ausentes quedan como NaN.
"""
from __future__ import annotations

import hashlib
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

Frame = Dict[str, Any]

HIP_POINTS = (7, 8)
LEFT_SIDE = (1, 3, 5, 7, 9, 11)
RIGHT_SIDE = (2, 4, 6, 8, 10, 12)

# (x base, y base, jitter x, jitter y, visibilidad) por landmark
_BASE_LANDMARKS = np.array([
    (0.50, 0.20, 0.10, 0.05, 0.9),  # cabeza
    (0.45, 0.35, 0.10, 0.05, 0.8),  # hombro izq
    (0.55, 0.35, 0.10, 0.05, 0.8),  # hombro der
    (0.40, 0.50, 0.10, 0.05, 0.7),  # codo izq
    (0.60, 0.50, 0.10, 0.05, 0.7),  # codo der
    (0.35, 0.65, 0.10, 0.05, 0.6),  # muñeca izq
    (0.65, 0.65, 0.10, 0.05, 0.6),  # muñeca der
    (0.48, 0.70, 0.04, 0.05, 0.9),  # cadera izq
    (0.52, 0.70, 0.04, 0.05, 0.9),  # cadera der
    (0.47, 0.85, 0.06, 0.05, 0.8),  # rodilla izq
    (0.53, 0.85, 0.06, 0.05, 0.8),  # rodilla der
    (0.46, 0.95, 0.08, 0.03, 0.7),  # tobillo izq
    (0.54, 0.95, 0.08, 0.03, 0.7),  # tobillo der
])


def simulate_keypoints(video_data: Optional[str], frame_count: int = 30) -> List[Frame]:
    """
    Frames de pose de relleno (no hay extractor de pose real en el servidor).
    La semilla sale del propio vídeo: mismo vídeo -> mismos frames.
    """
    digest = hashlib.sha256((video_data or "").encode("utf-8")).hexdigest()
    rng = np.random.default_rng(int(digest[:16], 16))

    bx, by, jx, jy, vis = _BASE_LANDMARKS.T
    frames: List[Frame] = []
    for i in range(frame_count):
        xs = bx + rng.random(len(bx)) * jx - jx / 2
        ys = by + rng.random(len(by)) * jy
        keypoints = [
            {"x": float(x), "y": float(y), "visibility": float(v)}
            for x, y, v in zip(xs, ys, vis)
        ]
        frames.append({"keypoints": keypoints, "timestamp": round(i * 33.33, 2)})
    return frames


def _finite(value) -> Optional[float]:
    number = float(value)
    return number if np.isfinite(number) else None


def normalize_frames(raw: Any) -> List[Frame]:
    """
    Acepta lo que mande el cliente y devuelve frames válidos.
    Ignora frames sin lista de keypoints. Un punto sin x/y numéricos y
    finitos queda como None.
    """
    if not isinstance(raw, list):
        return []
    frames: List[Frame] = []
    for i, fr in enumerate(raw):
        if not isinstance(fr, dict) or not isinstance(fr.get("keypoints"), list):
            continue
        points = []
        for p in fr["keypoints"]:
            try:
                x, y = _finite(p["x"]), _finite(p["y"])
                vis = _finite(p.get("visibility", 1.0))
            except (KeyError, TypeError, ValueError):
                points.append(None)
                continue
            if x is None or y is None:
                points.append(None)
                continue
            points.append({"x": x, "y": y, "visibility": 1.0 if vis is None else vis})
        ts = fr.get("timestamp")
        if isinstance(ts, (int, float)) and not isinstance(ts, bool) and np.isfinite(ts):
            timestamp = float(ts)
        else:
            timestamp = round(i * 33.33, 2)
        frames.append({"keypoints": points, "timestamp": timestamp})
    return frames


# -------- arrays --------
def _xy(point) -> np.ndarray:
    return np.array([point["x"], point["y"]], dtype=float)


def stack_frames(frames: Sequence[Frame], width: int = 0) -> np.ndarray:
    """Array (frames, landmarks, 2) con NaN donde falta el punto."""
    width = max([width] + [len(fr.get("keypoints") or []) for fr in frames])
    arr = np.full((len(frames), width, 2), np.nan)
    for i, fr in enumerate(frames):
        for j, p in enumerate(fr.get("keypoints") or []):
            if p:
                arr[i, j] = (p["x"], p["y"])
    return arr


def _valid_indices(indices: Sequence[int], count: int) -> bool:
    return len(indices) == count and all(isinstance(i, int) and i >= 0 for i in indices)


def point_distance(a, b) -> float:
    return float(np.linalg.norm(_xy(a) - _xy(b)))


def _angles(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    """Ángulo en grados en el vértice b, vectorizado sobre la primera dimensión."""
    ba, bc = a - b, c - b
    denom = np.linalg.norm(ba, axis=-1) * np.linalg.norm(bc, axis=-1)
    with np.errstate(invalid="ignore", divide="ignore"):
        cos = np.sum(ba * bc, axis=-1) / denom
        angles = np.degrees(np.arccos(np.clip(cos, -1.0, 1.0)))
    return np.where(denom == 0, 0.0, angles)


def joint_angle(a, b, c) -> float:
    """Ángulo en grados en el vértice b (a-b-c)."""
    return float(_angles(_xy(a), _xy(b), _xy(c)))


def mean_joint_angle(frames: Sequence[Frame], indices: Sequence[int]) -> Optional[float]:
    """Media del ángulo articular a lo largo de los frames (None si no hay datos)."""
    if not frames or not _valid_indices(indices, 3):
        return None
    arr = stack_frames(frames, max(indices) + 1)
    a, b, c = (arr[:, i] for i in indices)
    present = ~np.isnan(np.concatenate([a, b, c], axis=-1)).any(axis=-1)
    if not present.any():
        return None
    return float(np.mean(_angles(a[present], b[present], c[present])))


def mean_point_distance(frames: Sequence[Frame], indices: Sequence[int]) -> Optional[float]:
    if not frames or not _valid_indices(indices, 2):
        return None
    arr = stack_frames(frames, max(indices) + 1)
    dist = np.linalg.norm(arr[:, indices[0]] - arr[:, indices[1]], axis=-1)
    dist = dist[~np.isnan(dist)]
    return float(np.mean(dist)) if dist.size else None


def mean_landmark_distance(frames: Sequence[Frame], reference: Sequence[Frame]) -> Optional[float]:
    """Distancia media entre landmarks homólogos de dos secuencias del mismo largo."""
    n = min(len(frames), len(reference))
    if n == 0:
        return None
    a, b = stack_frames(frames[:n]), stack_frames(reference[:n])
    width = min(a.shape[1], b.shape[1])
    dist = np.linalg.norm(a[:, :width] - b[:, :width], axis=-1)
    dist = dist[~np.isnan(dist)]
    return float(np.mean(dist)) if dist.size else None


def resample(frames: Sequence[Frame], count: int) -> List[Frame]:
    """Muestreo por vecino más cercano a `count` frames."""
    if not frames or count <= 0:
        return []
    if len(frames) == count:
        return list(frames)
    picks = np.rint(np.linspace(0, len(frames) - 1, count)).astype(int)
    return [frames[i] for i in picks]


# -------- métricas de movimiento --------
def _frame_motion(arr: np.ndarray) -> np.ndarray:
    """Desplazamiento de cada landmark entre frames consecutivos (frames-1, landmarks)."""
    return np.linalg.norm(arr[1:] - arr[:-1], axis=-1)


def _avg_motion(arr: np.ndarray, indices: Sequence[int]) -> float:
    if arr.shape[0] < 2:
        return 0.0
    idx = [i for i in indices if i < arr.shape[1]]
    motion = _frame_motion(arr[:, idx])
    motion = motion[~np.isnan(motion)]
    return float(np.mean(motion)) if motion.size else 0.0


def _tempo_variation(arr: np.ndarray) -> float:
    """Coeficiente de variación del movimiento medio por frame."""
    if arr.shape[0] < 3:
        return 0.0
    motion = _frame_motion(arr)
    seen = ~np.isnan(motion).all(axis=1)
    if seen.sum() < 2:
        return 0.0
    movements = np.nanmean(motion[seen], axis=1)
    mean = np.mean(movements)
    return float(np.std(movements) / mean) if mean > 0 else 0.0


def _score(value: float) -> int:
    return int(round(value)) if np.isfinite(value) else 0


def movement_metrics(frames: Sequence[Frame]) -> Dict[str, int]:
    """
    Métricas simples (0-100 salvo rango de movimiento, en % de altura de imagen):
      - rangeOfMotion: amplitud vertical de todos los puntos
      - stability: poco desplazamiento de caderas = más estable
      - symmetry: lado izquierdo vs derecho
      - tempo: regularidad de la velocidad entre frames
    """
    if not frames:
        return {"rangeOfMotion": 0, "stability": 0, "symmetry": 0, "tempo": 0}

    arr = stack_frames(frames)
    ys = arr[..., 1]
    range_of_motion = (np.nanmax(ys) - np.nanmin(ys)) * 100 if np.isfinite(ys).any() else 0.0

    stability = max(0.0, 100 - _avg_motion(arr, HIP_POINTS) * 100)
    left = _avg_motion(arr, LEFT_SIDE)
    right = _avg_motion(arr, RIGHT_SIDE)
    symmetry = max(0.0, 100 - abs(left - right) * 100)
    tempo = max(0.0, 100 - _tempo_variation(arr) * 100)

    return {
        "rangeOfMotion": _score(range_of_motion),
        "stability": _score(stability),
        "symmetry": _score(symmetry),
        "tempo": _score(tempo),
    }
