# hud_circle.py
# Overlay for the air-circle demo:
# - live stroke trail (thicker when the finger moves slowly), fading after release
# - image panel + companion panel outlines projected back into the camera view
# - latest crop as a thumbnail, status bar on top, hints at the bottom

from __future__ import annotations
import threading
import cv2
import numpy as np

from panel_layout import panel_corners


def _clamp(x, a, b):
    return a if x < a else (b if x > b else x)


class HUDCircle:
    def __init__(self):
        self.strokes: dict[int, list[tuple[int, int, float]]] = {}   # id -> [(x, y, thickness)]
        self.opacity: dict[int, float] = {}
        self._lock = threading.Lock()   # fade ticks arrive on another thread

        self.result = None
        self._panel_px = None
        self._companion_px = None
        self._thumb = None

        self.show_hints = True
        self.status = "Pinch (right hand) and draw a circle around something"

        # soft palette (BGR)
        self.col_stroke = (255, 235, 160)
        self.col_glow = (210, 170, 120)
        self.col_panel = (200, 255, 245)
        self.col_companion = (160, 190, 210)
        self.col_text = (235, 245, 255)
        self.col_shadow = (25, 25, 25)

        self.ui_scale = 1.0
        self.panel_alpha = 0.55
        self.panel_col = (18, 18, 22)   # dark glass
        self.panel_edge = (90, 115, 135)
        self.font = cv2.FONT_HERSHEY_SIMPLEX
        self.font_base = 0.62
        self.font_small_base = 0.48

    # ---------- public API ----------
    def trace(self, curve_id: int, px, speed: float):
        # slow strokes draw thick, fast ones thin
        thick = float(_clamp(6.0 - 8.0 * float(speed), 2.0, 6.0))
        with self._lock:
            self.strokes.setdefault(curve_id, []).append((int(px[0]), int(px[1]), thick))
            self.opacity[curve_id] = 1.0

    def set_opacity(self, curve_id: int, opacity: float):
        with self._lock:
            if curve_id in self.strokes:
                self.opacity[curve_id] = float(opacity)

    def drop(self, curve_id: int):
        with self._lock:
            self.strokes.pop(curve_id, None)
            self.opacity.pop(curve_id, None)

    def show_result(self, result, project):
        self.result = result
        self._panel_px = self._outline(result.image_panel, project)
        self._companion_px = self._outline(result.companion_panel, project)
        self._thumb = None
        self.status = (f"Circle {result.curve_id}: {result.image_panel.width:.2f} x "
                       f"{result.image_panel.height:.2f} m -> {result.image.width}x{result.image.height}px")

    def render(self, frame):
        H, W = frame.shape[:2]
        self.ui_scale = float(_clamp(min(W, H) / 720.0, 0.85, 1.8))

        self._draw_strokes(frame)
        self._draw_panels(frame)
        self._draw_thumb(frame)
        self._draw_hud(frame)
        return frame

    def handle_key(self, key: int):
        if key == ord("h"):
            self.show_hints = not self.show_hints
        elif key == ord("c") or key == ord("x"):
            self.clear()

    def clear(self):
        with self._lock:
            self.strokes.clear()
            self.opacity.clear()
        self.result = None
        self._panel_px = None
        self._companion_px = None
        self._thumb = None

    # ---------- internals ----------
    def _outline(self, placement, project):
        pts = []
        for c in panel_corners(placement):
            uv = project(c)
            if uv is None:
                return None
            pts.append([int(uv[0]), int(uv[1])])
        return np.array(pts, dtype=np.int32)

    def _draw_strokes(self, frame):
        with self._lock:
            items = [(cid, list(pts), self.opacity.get(cid, 1.0)) for cid, pts in self.strokes.items()]

        for cid, pts, alpha in items:
            if alpha <= 0.0 or len(pts) < 2:
                continue
            layer = frame.copy()
            for (x0, y0, t0), (x1, y1, _) in zip(pts, pts[1:]):
                cv2.line(layer, (x0, y0), (x1, y1), self.col_glow, int(t0 + 4), cv2.LINE_AA)
                cv2.line(layer, (x0, y0), (x1, y1), self.col_stroke, int(t0), cv2.LINE_AA)
            cv2.addWeighted(layer, alpha, frame, 1.0 - alpha, 0, frame)

    def _draw_panels(self, frame):
        if self._panel_px is not None:
            cv2.polylines(frame, [self._panel_px], True, self.col_panel, 2, cv2.LINE_AA)
        if self._companion_px is not None:
            cv2.polylines(frame, [self._companion_px], True, self.col_companion, 1, cv2.LINE_AA)
            tl = self._companion_px[0]
            self._text(frame, "RESULT", (int(tl[0]) + 6, int(tl[1]) + 18), self.font_small_base)

    def _draw_thumb(self, frame):
        if self.result is None:
            return
        H, W = frame.shape[:2]
        pad = int(14 * self.ui_scale)
        th = int(160 * self.ui_scale)

        if self._thumb is None or self._thumb.shape[0] != th:
            img = self.result.image.pixels
            tw = max(1, int(img.shape[1] * (th / float(img.shape[0]))))
            thumb = cv2.resize(img, (tw, th), interpolation=cv2.INTER_AREA)
            if thumb.ndim == 2:
                thumb = cv2.cvtColor(thumb, cv2.COLOR_GRAY2BGR)
            self._thumb = thumb

        th, tw = self._thumb.shape[:2]
        x0 = W - pad - tw
        y0 = pad + int(62 * self.ui_scale) + pad
        if x0 < 0 or y0 + th > H:
            return
        frame[y0:y0 + th, x0:x0 + tw] = self._thumb
        cv2.rectangle(frame, (x0, y0), (x0 + tw, y0 + th), self.panel_edge, 1, cv2.LINE_AA)

    def _draw_hud(self, frame):
        H, W = frame.shape[:2]
        pad = int(14 * self.ui_scale)

        top_h = int(62 * self.ui_scale)
        self._panel(frame, pad, pad, W - 2 * pad, top_h)
        n = len(self.strokes)
        self._text(frame, self.status, (pad + int(16 * self.ui_scale), pad + int(26 * self.ui_scale)), self.font_base)
        self._text(frame, f"Strokes on screen: {n}", (pad + int(16 * self.ui_scale), pad + int(50 * self.ui_scale)), self.font_small_base)

        if self.show_hints:
            bottom_h = int(38 * self.ui_scale)
            self._panel(frame, pad, H - pad - bottom_h, W - 2 * pad, bottom_h)
            hint = "Pinch right hand to draw   |   release to crop   |   C clear  H hints  ESC quit"
            self._text(frame, hint, (pad + int(16 * self.ui_scale), H - pad - int(12 * self.ui_scale)), self.font_small_base)

    def _panel(self, frame, x, y, w, h):
        x0 = max(0, int(x))
        y0 = max(0, int(y))
        x1 = min(frame.shape[1], int(x + w))
        y1 = min(frame.shape[0], int(y + h))
        if x1 <= x0 or y1 <= y0:
            return
        overlay = frame.copy()
        cv2.rectangle(overlay, (x0, y0), (x1, y1), self.panel_col, -1)
        cv2.addWeighted(overlay, self.panel_alpha, frame, 1.0 - self.panel_alpha, 0, frame)
        cv2.rectangle(frame, (x0, y0), (x1, y1), self.panel_edge, 1, cv2.LINE_AA)

    def _text(self, frame, s, org, scale):
        sc = float(scale) * self.ui_scale
        thick = 1 if sc < 0.9 else 2

        # subtle shadow
        cv2.putText(frame, s, (org[0] + 1, org[1] + 1),
                    self.font, sc, self.col_shadow, thick + 1, cv2.LINE_AA)
        cv2.putText(frame, s, org, self.font, sc,
                    self.col_text, thick, cv2.LINE_AA)
