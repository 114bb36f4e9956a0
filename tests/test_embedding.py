import numpy as np

from posecount.logic.embedding import EMBEDDING_PAIRS, EMBEDDING_SHAPE, PoseEmbedder, mirror, to_array
from posecount.logic.geometry import PoseLandmark


def _touches(pair, joint):
    return any(joint == anchor or (isinstance(anchor, tuple) and joint in anchor) for anchor in pair)


def test_embedding_shape_and_finite(standing_pose):
    embedding = PoseEmbedder().embed(standing_pose)
    assert embedding.shape == EMBEDDING_SHAPE
    assert np.isfinite(embedding).all()


def test_translation_and_scale_invariance(squat_pose):
    embedder = PoseEmbedder()
    moved = {joint: point * 2.5 + np.array([40.0, -15.0, 3.0]) for joint, point in squat_pose.items()}
    np.testing.assert_allclose(embedder.embed(moved), embedder.embed(squat_pose), atol=1e-9)


def test_2d_points_are_padded_with_zero_depth(standing_pose):
    flat = {joint: point[:2] for joint, point in standing_pose.items()}
    points = to_array(flat)
    assert (points[:, 2] == 0).all()
    assert np.isfinite(PoseEmbedder().embed(flat)).all()


def test_different_postures_embed_differently(standing_pose, squat_pose):
    embedder = PoseEmbedder()
    assert not np.allclose(embedder.embed(standing_pose), embedder.embed(squat_pose))


def test_missing_joint_yields_nan_rows_only_where_used(squat_pose):
    del squat_pose[PoseLandmark.LEFT_WRIST]
    embedding = PoseEmbedder().embed(squat_pose)
    for row, pair in enumerate(EMBEDDING_PAIRS):
        if _touches(pair, PoseLandmark.LEFT_WRIST):
            assert np.isnan(embedding[row]).all()
        else:
            assert np.isfinite(embedding[row]).all()


def test_missing_hip_makes_embedding_unusable(standing_pose):
    del standing_pose[PoseLandmark.RIGHT_HIP]
    assert np.isnan(PoseEmbedder().embed(standing_pose)).all()


def test_empty_landmarks_embed_to_nan():
    assert np.isnan(PoseEmbedder().embed({})).all()


def test_mirror_negates_x_only(standing_pose):
    flipped = mirror(standing_pose)
    np.testing.assert_allclose(flipped[PoseLandmark.LEFT_SHOULDER], [-20.0, -120.0, 0.0])
    np.testing.assert_allclose(standing_pose[PoseLandmark.LEFT_SHOULDER], [20.0, -120.0, 0.0])


def test_hip_to_wrist_pairs_weighted_twice():
    assert len(EMBEDDING_PAIRS) == 23
    assert EMBEDDING_PAIRS.count((PoseLandmark.LEFT_HIP, PoseLandmark.LEFT_WRIST)) == 2
    assert EMBEDDING_PAIRS.count((PoseLandmark.RIGHT_HIP, PoseLandmark.RIGHT_WRIST)) == 2
    assert len(set(EMBEDDING_PAIRS)) == 21
