# app.py - AIR CIRCLE CROP
# Webcam demo: pinch with the right hand, draw a circle around something in
# view, release, and the circled region comes back as an upright crop with
# its two panels outlined in the camera view.
import logging
import os
import time
import cv2

from camera import PinholeCamera
from circle_store import CircleStore
from hands import Hands, hand_input
from hud_circle import HUDCircle
from logging_config import setup_logging
from params import Params
from pipeline import PipelineWorker
from stroke_tracker import StrokeTracker

WINDOW_NAME = "Air Circle Crop"
CROP_WINDOW_NAME = "Circled"

logger = logging.getLogger(__name__)


def open_camera(max_index=6):
    backend = cv2.CAP_DSHOW if os.name == "nt" else cv2.CAP_ANY
    for i in range(max_index):
        cap = cv2.VideoCapture(i, backend)
        if cap.isOpened():
            ok, _ = cap.read()
            if ok:
                print(f"✅ Using camera index: {i}")
                return cap
        cap.release()
    raise RuntimeError(f"❌ No working camera found (0–{max_index-1}).")


def _as_hands_list(hand_result):
    if hand_result is None:
        return []
    if isinstance(hand_result, dict) and isinstance(hand_result.get("hands"), list):
        return hand_result["hands"]
    return []


def main():
    setup_logging(logging.INFO)
    params = Params()

    cap = open_camera()
    tracker_hands = Hands(max_hands=2)
    hud = HUDCircle()
    store = CircleStore()

    camera = None
    latest = {"frame": None}

    def on_trace(position, speed):
        cid = tracker.current_id
        if cid not in hud.strokes:
            # a new stroke supersedes whatever is still fading
            for old in list(hud.strokes):
                hud.drop(old)
        uv = camera.project(position)
        if uv is not None:
            hud.trace(cid, uv, speed)

    tracker = StrokeTracker(
        store,
        params,
        on_trace=on_trace,
        on_fade=hud.set_opacity,
        on_fade_done=hud.drop,
    )

    worker = PipelineWorker(params).start()
    worker.watch(store, lambda: latest["frame"])

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)

    prev = time.time()
    fps_smooth = 0.0

    print("\n" + "="*60)
    print("⭕ AIR CIRCLE CROP")
    print("="*60)
    print("\n📋 CONTROLS:")
    print(f"   Pinch {params.drawing_hand} thumb + index and draw a loop")
    print("   Release the pinch to crop the circled region")
    print("   The other hand is ignored (kept free for UI)")
    print("   C - Clear overlay | H - Toggle hints")
    print("   ESC - Exit")
    print("\n" + "="*60 + "\n")

    while True:
        ok, frame = cap.read()
        if not ok:
            break

        frame = cv2.flip(frame, 1)
        H, W = frame.shape[:2]
        if camera is None or camera.width != W or camera.height != H:
            camera = PinholeCamera(W, H, hfov_deg=params.camera_hfov_deg)

        now = time.time()
        dt = max(1e-6, now - prev)
        prev = now
        fps = 1.0 / dt
        fps_smooth = fps if fps_smooth == 0 else 0.9 * fps_smooth + 0.1 * fps

        # the pipeline crops from the frame the circle was finished on
        latest["frame"] = camera.frame(frame.copy())

        hands = _as_hands_list(tracker_hands.process(frame))
        drawing_hand = None
        for hand in hands:
            if hand.get("handedness") == params.drawing_hand:
                drawing_hand = hand
                break
        hi = hand_input(drawing_hand, camera, params) if drawing_hand is not None else None
        tracker.receive_hand(hi, params.drawing_hand, now)

        result = worker.pop_result()
        if result is not None:
            hud.show_result(result, camera.project)
            cv2.imshow(CROP_WINDOW_NAME, result.image.pixels)

        composed = hud.render(frame)

        fps_text = f"FPS: {fps_smooth:5.1f}"
        cv2.putText(composed, fps_text, (12, composed.shape[0] - 12), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 245, 0), 3, cv2.LINE_AA)
        cv2.putText(composed, fps_text, (12, composed.shape[0] - 12), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 128), 2, cv2.LINE_AA)

        cv2.imshow(WINDOW_NAME, composed)

        key = cv2.waitKey(1) & 0xFF
        if key == 27:
            break
        if key != 255:
            hud.handle_key(key)

    worker.stop()
    tracker_hands.close()
    cap.release()
    cv2.destroyAllWindows()

    logger.info("%d circles drawn this session", len(store))
    print("\n✅ Air circle crop shutdown complete")


if __name__ == "__main__":
    main()
