from camgeom.core.intrinsics import CameraIntrinsics
from camgeom.core.pose import CameraPose, Extrinsics, camera_pose_to_extrinsics, extrinsics_to_camera_pose
from camgeom.core.projection import camera_matrix, image_to_world, world_to_image
from camgeom.core.rotation import rotation_matrix_to_vector, rotation_vector_to_matrix
from camgeom.filters.separable import is_filter_separable
from camgeom.patterns.checkerboard import CheckerboardSpec, generate_checkerboard_points
from camgeom.stereo.parameters import StereoParameters
from camgeom.stereo.reconstruction import reconstruct_scene
from camgeom.validation import InvalidArgumentError

__all__ = [
    "InvalidArgumentError",
    "rotation_matrix_to_vector",
    "rotation_vector_to_matrix",
    "camera_pose_to_extrinsics",
    "extrinsics_to_camera_pose",
    "Extrinsics",
    "CameraPose",
    "CameraIntrinsics",
    "camera_matrix",
    "world_to_image",
    "image_to_world",
    "generate_checkerboard_points",
    "CheckerboardSpec",
    "StereoParameters",
    "reconstruct_scene",
    "is_filter_separable",
]
