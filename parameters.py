import json
from dataclasses import asdict, dataclass

CREATE_RELEASE = "createRelease"
CREATE_UNSTABLE_BRANCH = "createUnstableBranch"
UPDATE_RELEASE = "updateRelease"

MODES = (CREATE_RELEASE, CREATE_UNSTABLE_BRANCH, UPDATE_RELEASE)

# Sentinel for "no previous release" in prevRelease
NO_PREVIOUS_RELEASE = "none"


class ParameterError(ValueError):
    pass


def parse_flag(value) -> bool:
    """CodePipeline passes flags as strings; only "true" (any case) is true."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() == "true"


@dataclass
class OperationParameters:
    """UserParameters of a single pipeline job."""

    mode: str = ""
    owner: str = ""
    repository: str = ""
    commit: str = ""
    current_release: str = ""
    prev_release: str = NO_PREVIOUS_RELEASE
    unstable_branch: str = ""
    prerelease: bool = False

    @property
    def has_known_mode(self) -> bool:
        return self.mode in MODES

    def to_log(self) -> dict:
        return asdict(self)


def parse_user_parameters(raw) -> OperationParameters:
    if raw is None or raw == "":
        raise ParameterError("UserParameters is empty")
    if isinstance(raw, dict):
        data = raw
    else:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise ParameterError(f"UserParameters is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise ParameterError("UserParameters must be a JSON object")

    prev_release = data.get("prevRelease")
    return OperationParameters(
        mode=str(data.get("mode") or ""),
        owner=str(data.get("owner") or ""),
        repository=str(data.get("repository") or ""),
        commit=str(data.get("commit") or ""),
        current_release=str(data.get("currentRelease") or ""),
        prev_release=str(prev_release) if prev_release else NO_PREVIOUS_RELEASE,
        unstable_branch=str(data.get("unstableBranch") or ""),
        prerelease=parse_flag(data.get("prerelease")),
    )


def user_parameters_from_event(event: dict) -> OperationParameters:
    """Pulls the UserParameters string out of a CodePipeline job event."""
    try:
        configuration = event["CodePipeline.job"]["data"]["actionConfiguration"]["configuration"]
    except (KeyError, TypeError):
        raise ParameterError("Event has no action configuration")
    return parse_user_parameters(configuration.get("UserParameters"))
