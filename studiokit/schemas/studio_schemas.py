"""
Studio wire schemas using Pydantic.

Structure of the objects exchanged with the remote Studio management API.
Field aliases are the exact wire names; Python code uses the snake_case names.
"""
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ACTIVITY_COMPLETE = "Complete"


class ResourceFileFormat(str, Enum):
    """Data type ids accepted by the resource upload endpoint."""
    GENERIC_CSV = "GenericCSV"
    GENERIC_CSV_NO_HEADER = "GenericCSVNoHeader"
    GENERIC_TSV = "GenericTSV"
    GENERIC_TSV_NO_HEADER = "GenericTSVNoHeader"
    ARFF = "ARFF"
    PLAIN_TEXT = "PlainText"
    ZIP = "Zip"
    R_DATA = "RData"
    SVMLIGHT = "SvmLight"


class WorkspaceSettings(BaseModel):
    """Everything needed to address one workspace."""
    model_config = ConfigDict(frozen=True)

    workspace_id: str = Field(..., description="Workspace identifier")
    authorization_token: str = Field(..., description="Primary or secondary workspace token")
    location: str = Field(..., description="Region name, e.g. 'South Central US'")


class ExperimentSummary(BaseModel):
    """Typed summary of an experiment; unknown wire fields are kept."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    experiment_id: str = Field(..., alias="ExperimentId", description="Experiment identifier")
    description: str = Field("", alias="Description", description="Display name of the experiment")
    etag: Optional[str] = Field(None, alias="Etag", description="Concurrency tag of the stored version")
    creator: Optional[str] = Field(None, alias="Creator", description="Author of the experiment")
    status: Optional[Dict[str, Any]] = Field(None, alias="Status", description="Last run status block")


class UserAsset(BaseModel):
    """Trained model or transform stored in a workspace."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., alias="Id", description="Asset identifier")
    name: str = Field("", alias="Name", description="Display name of the asset")
    data_type_id: Optional[str] = Field(None, alias="DataTypeId", description="Asset kind, e.g. 'ILearnerDotNet'")
    description: Optional[str] = Field(None, alias="Description", description="Free-text description")
    family_id: Optional[str] = Field(None, alias="FamilyId", description="Identifier shared by all versions of the asset")


class Activity(BaseModel):
    """Remote long-running pack/unpack activity."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    activity_id: str = Field(..., alias="ActivityId", description="Activity identifier")
    status: str = Field("", alias="Status", description="Provider-defined status; 'Complete' is terminal")
    location: Optional[str] = Field(None, alias="Location", description="Transfer handle once packed")

    @property
    def is_complete(self) -> bool:
        return self.status == ACTIVITY_COMPLETE


ExperimentRef = Union[str, ExperimentSummary]


def experiment_id_of(experiment: ExperimentRef) -> str:
    """Accept either an experiment id or a summary."""
    if isinstance(experiment, ExperimentSummary):
        return experiment.experiment_id
    return experiment
