from pydantic import BaseModel


class FollowState(BaseModel):
    follower_id: str
    following_id: str
    following: bool
