import os

import cv2

CENTER_X = 0.5


def _load_face_cascade() -> cv2.CascadeClassifier | None:
    cascade_path = os.path.join(cv2.data.haarcascades, "haarcascade_frontalface_default.xml")
    cascade = cv2.CascadeClassifier(cascade_path)
    if cascade.empty():
        print(f"  Warning: Could not load Haar cascade from {cascade_path}")
        return None
    return cascade


def _read_frame(video_path: str, seconds: float):
    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        print(f"  Warning: Could not open video for framing analysis: {video_path}")
        return None
    try:
        cap.set(cv2.CAP_PROP_POS_MSEC, seconds * 1000)
        success, image = cap.read()
    finally:
        cap.release()
    if not success:
        print(f"  Warning: Could not read frame at {seconds:.1f}s for framing.")
        return None
    return image


def detect_primary_face_x(video_path: str, seconds: float) -> float:
    """
    Normalized X center (0.0 - 1.0) of the largest face in the frame at `seconds`.
    Falls back to the frame center when no face can be found.
    """
    face_cascade = _load_face_cascade()
    if face_cascade is None:
        return CENTER_X

    image = _read_frame(video_path, seconds)
    if image is None:
        return CENTER_X

    try:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        faces = face_cascade.detectMultiScale(gray, 1.1, 5)
    except cv2.error as exc:
        print(f"  Error during face detection (OpenCV): {exc}")
        return CENTER_X

    if len(faces) == 0:
        return CENTER_X

    x, _, w, _ = max(faces, key=lambda f: f[2] * f[3])
    img_w = image.shape[1]
    return max(0.0, min(1.0, (x + w / 2) / img_w))
