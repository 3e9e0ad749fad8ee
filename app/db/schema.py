from typing import Optional, List, Dict, Any
from datetime import datetime, date
import uuid
from sqlmodel import SQLModel, Field, Relationship, JSON
from enum import Enum


class ProfileRole(str, Enum):
    SUPER_ADMIN = "super_admin"  # Manages all data
    DRIVER = "driver"            # Manages only their own missions


class MissionStatus(str, Enum):
    DRAFT = "draft"
    COMPLETED = "completed"      # Weighings recorded by the driver
    VALIDATED = "validated"      # Checked by an admin, visible to the client


class MissionRequestStatus(str, Enum):
    PENDING = "pending"
    VIEWED = "viewed"
    CONVERTED = "converted"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class TimestampMixin(SQLModel):
    """
    A foundational mixin that provides standard audit timestamps for database records.
    Every entity inheriting from this mixin tracks when it was originally created
    and when it was last modified.
    """
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="The exact UTC timestamp when this record was first persisted in the database. Example: '2024-01-15 14:30:00'"
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column_kwargs={"onupdate": datetime.utcnow},
        description="The exact UTC timestamp when this record was last modified. Updates automatically."
    )


class Profile(TimestampMixin, SQLModel, table=True):
    """
    A person allowed to sign in: either the administrator or a driver.
    The login credential lives on the profile itself, so removing the
    profile also removes the account.
    """
    __tablename__ = "profiles"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        description="The unique identifier for the account."
    )
    email: str = Field(
        unique=True,
        index=True,
        description="Login email, stored lowercase. Example: 'driver@example.com'"
    )
    full_name: str = Field(
        description="Display name used on mission lists and reports. Example: 'Jean Dupont'"
    )
    role: ProfileRole = Field(
        default=ProfileRole.DRIVER,
        description="Authorization role. Admins manage everything, drivers only their own missions."
    )
    phone: Optional[str] = Field(default=None)
    is_active: bool = Field(
        default=True,
        description="Inactive profiles cannot sign in and are hidden from driver selection lists."
    )
    hashed_password: str = Field(
        description="Password hash produced by passlib. Never exposed through the API."
    )


class Client(TimestampMixin, SQLModel, table=True):
    """
    A customer whose material is collected. Clients never sign in: they read
    their own missions through an opaque tracking token.
    """
    __tablename__ = "clients"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        description="The unique identifier for the client."
    )
    name: str = Field(
        index=True,
        description="Legal or display name. Example: 'Scierie du Moulin'"
    )
    siret: Optional[str] = Field(
        default=None,
        index=True,
        description="Company tax identifier. Example: '12345678900012'"
    )
    email: str = Field(description="Contact email address.")
    phone: Optional[str] = Field(default=None)
    address: Optional[str] = Field(default=None)
    tracking_token: str = Field(
        unique=True,
        index=True,
        description="The current tracking token handed to the client. Older tokens live in 'tracking_tokens'."
    )
    is_active: bool = Field(default=True)

    collection_sites: List["CollectionSite"] = Relationship(
        back_populates="client", sa_relationship_kwargs={"cascade": "all, delete-orphan"})
    tokens: List["TrackingToken"] = Relationship(
        back_populates="client", sa_relationship_kwargs={"cascade": "all, delete-orphan"})


class TrackingToken(TimestampMixin, SQLModel, table=True):
    """
    Every tracking token ever issued to a client. A token resolves to its
    client for as long as it has not been revoked.
    """
    __tablename__ = "tracking_tokens"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    client_id: uuid.UUID = Field(foreign_key="clients.id", index=True)
    token: str = Field(unique=True, index=True)
    revoked_at: Optional[datetime] = Field(
        default=None,
        description="Set when the token was revoked during a rotation. Revoked tokens no longer resolve."
    )

    client: Client = Relationship(back_populates="tokens")


class CollectionSite(TimestampMixin, SQLModel, table=True):
    """Pickup location. Belongs to exactly one client."""
    __tablename__ = "collection_sites"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    client_id: uuid.UUID = Field(
        foreign_key="clients.id",
        index=True,
        description="The client owning this site."
    )
    name: str = Field(description="Example: 'Scierie - Cour Nord'")
    address: str = Field(description="Example: '12 route de Nantes, 44000 Nantes'")
    is_active: bool = Field(default=True)

    client: Client = Relationship(back_populates="collection_sites")


class DepositSite(TimestampMixin, SQLModel, table=True):
    """Drop-off location shared by all clients (composting platform, sorting center)."""
    __tablename__ = "deposit_sites"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    address: str
    is_active: bool = Field(default=True)


class Vehicle(TimestampMixin, SQLModel, table=True):
    __tablename__ = "vehicles"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(description="Example: 'Camion benne 26T'")
    license_plate: str = Field(
        unique=True,
        index=True,
        description="Example: 'AB-123-CD'"
    )
    vehicle_type: str = Field(description="Example: 'Ampliroll'")
    is_active: bool = Field(default=True)


class MaterialType(TimestampMixin, SQLModel, table=True):
    __tablename__ = "material_types"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(
        unique=True,
        index=True,
        description="Category of collected material. Example: 'Bois de classe A'"
    )
    description: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)


class Mission(TimestampMixin, SQLModel, table=True):
    """
    The authoritative transport record: one collection, weighed empty and
    loaded. The net weight is derived from the two weighings on every write
    and is never taken from user input.
    """
    __tablename__ = "missions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    client_id: uuid.UUID = Field(foreign_key="clients.id", index=True)
    driver_id: uuid.UUID = Field(foreign_key="profiles.id", index=True)
    collection_site_id: uuid.UUID = Field(foreign_key="collection_sites.id")
    deposit_site_id: uuid.UUID = Field(foreign_key="deposit_sites.id")
    vehicle_id: uuid.UUID = Field(foreign_key="vehicles.id")
    material_type_id: uuid.UUID = Field(foreign_key="material_types.id")

    mission_date: date = Field(
        index=True,
        description="Day the collection took place. Example: '2024-01-15'"
    )
    empty_weight_kg: float = Field(
        description="Weighbridge reading of the empty vehicle, in kilograms. Example: 2000"
    )
    loaded_weight_kg: float = Field(
        description="Weighbridge reading of the loaded vehicle, in kilograms. Must exceed the empty weight. Example: 35752"
    )
    net_weight_tons: float = Field(
        description="(loaded - empty) / 1000, recomputed on every write. Example: 33.752"
    )
    driver_comment: Optional[str] = Field(default=None)
    order_number: Optional[str] = Field(
        default=None,
        description="Customer purchase order number printed on exports."
    )

    # Plain back-reference: the request may be deleted later.
    mission_request_id: Optional[uuid.UUID] = Field(default=None, unique=True)
    external_request_id: Optional[str] = Field(
        default=None,
        description="The client's own reference, copied from the originating request."
    )
    client_request_date: Optional[date] = Field(default=None)

    status: MissionStatus = Field(default=MissionStatus.COMPLETED, index=True)
    validated_at: Optional[datetime] = Field(default=None)
    version: int = Field(
        default=1,
        description="Incremented on every update. Used to reject stale writes."
    )

    client: Client = Relationship()
    driver: Profile = Relationship()
    collection_site: CollectionSite = Relationship()
    deposit_site: DepositSite = Relationship()
    vehicle: Vehicle = Relationship()
    material_type: MaterialType = Relationship()


class MissionRequest(TimestampMixin, SQLModel, table=True):
    """
    A collection asked for by a client through the tracking page, waiting to
    be turned into a Mission by a driver or an admin.
    """
    __tablename__ = "mission_requests"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    client_id: uuid.UUID = Field(foreign_key="clients.id", index=True)
    collection_site_id: uuid.UUID = Field(foreign_key="collection_sites.id")
    estimated_weight_tons: float = Field(
        description="Client estimate of the load. Example: 12.5"
    )
    external_request_id: Optional[str] = Field(
        default=None,
        description="Reference of the request in the client's own systems."
    )
    client_request_date: Optional[date] = Field(
        default=None,
        description="Date the client would like the collection to happen."
    )
    status: MissionRequestStatus = Field(
        default=MissionRequestStatus.PENDING, index=True)
    viewed_by_admin_at: Optional[datetime] = Field(default=None)
    viewed_by_driver_at: Optional[datetime] = Field(default=None)
    converted_at: Optional[datetime] = Field(default=None)
    mission_id: Optional[uuid.UUID] = Field(
        default=None,
        description="The Mission this request was converted into, if any."
    )

    client: Client = Relationship()
    collection_site: CollectionSite = Relationship()


class SystemAuditLog(SQLModel, table=True):
    """Append-only trail of writes on missions and mission requests."""
    __tablename__ = "audit_logs"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    actor_id: Optional[uuid.UUID] = Field(default=None, index=True)
    entity_type: str = Field(index=True)
    entity_id: uuid.UUID = Field(index=True)
    action: AuditAction
    changes: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    ip_address: Optional[str] = Field(default=None)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
