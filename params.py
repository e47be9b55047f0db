# params.py
# Tunable knobs for stroke capture, plane fitting and cropping.

EPS = 1e-6


class Params:
    """
    All tunable knobs live here so you don't hunt through code.
    """
    def __init__(self):
        # Stroke capture
        self.speed_window_sec = 0.1     # sliding window for smoothed speed
        self.speed_truncation = 2       # samples dropped from each end of the sorted speeds
        self.pinch_dist_m = 0.015       # thumb/index distance that counts as drawing
        self.drawing_hand = "right"     # the other hand is left for UI interaction

        # Curve -> plane
        self.resample_count = 1024

        # Crop output: shorter side always this many pixels
        self.crop_short_side = 1080

        # Companion (result) panel, meters
        self.companion_size = (0.3, 0.5)
        self.companion_spacing = 0.05
        self.world_up = (0.0, 1.0, 0.0)

        # Stroke fade-out after release
        self.fade_seconds = 0.3
        self.fade_fps = 60.0

        # Background pipeline
        self.worker_threads = 2

        # Demo camera (pinhole, camera at origin looking down -Z)
        self.camera_hfov_deg = 60.0
        self.hand_depth_m = 0.45        # nominal wrist depth in front of the lens
        self.hand_depth_scale = 0.6     # mediapipe relative z -> meters
