import cv2
import numpy as np

import mediapipe as mp

from camera import PinholeCamera
from params import Params
from stroke_tracker import HandInput

THUMB_TIP = 4
INDEX_TIP = 8


class Hands:
    """
    MediaPipe hands wrapper.

    Returns:
      {"hands": [hand0, hand1, ...]}

    Each hand dict contains:
      - "landmarks_px": [(x,y)*21] pixel coords
      - "landmarks_z":  [z*21] mediapipe relative depth (wrist = 0, negative = closer)
      - "handedness":   "left" / "right" (as seen by the user in a mirrored frame)
    """

    def __init__(self, max_hands=2, det_conf=0.5, track_conf=0.5):
        self.max_hands = max_hands
        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=max_hands,
            model_complexity=1,
            min_detection_confidence=float(det_conf),
            min_tracking_confidence=float(track_conf),
        )

    def process(self, frame_bgr):
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        # Fixes NORM_RECT without IMAGE_DIMENSIONS warning
        self.hands._image_width, self.hands._image_height = frame_bgr.shape[1], frame_bgr.shape[0]  # type: ignore[attr-defined]

        res = self.hands.process(frame_rgb)

        if not res.multi_hand_landmarks:
            return None

        h, w = frame_bgr.shape[:2]
        out = {"hands": []}

        for i, hand_lms in enumerate(res.multi_hand_landmarks):
            pts = []
            zs = []
            for lm in hand_lms.landmark:
                pts.append((lm.x * w, lm.y * h))
                zs.append(lm.z)

            label = "right"
            if res.multi_handedness and i < len(res.multi_handedness):
                label = res.multi_handedness[i].classification[0].label.lower()

            out["hands"].append({"landmarks_px": pts, "landmarks_z": zs, "handedness": label})

        return out

    def close(self):
        self.hands.close()


def tip_world(hand, idx, camera: PinholeCamera, params: Params):
    """Landmark `idx` -> 3D point in front of the camera (pinhole + relative depth)."""
    u, v = hand["landmarks_px"][idx]
    z = hand.get("landmarks_z", [0.0] * 21)[idx]
    depth = max(0.05, params.hand_depth_m + float(z) * params.hand_depth_scale)
    return camera.unproject(u, v, depth)


def hand_input(hand, camera: PinholeCamera, params: Params) -> HandInput:
    return HandInput(
        thumb_tip=np.asarray(tip_world(hand, THUMB_TIP, camera, params)),
        index_tip=np.asarray(tip_world(hand, INDEX_TIP, camera, params)),
        pinch_dist=params.pinch_dist_m,
    )
