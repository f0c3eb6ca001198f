"""project-editor: transactional editing of projects with audit and feed."""

__version__ = "0.1.0"

from project_editor.config import (
    EditorConfig as EditorConfig,
    load_config as load_config,
)
from project_editor.edges import (
    EDGE_INVERSES as EDGE_INVERSES,
    MEMBER_OF_PROJECT as MEMBER_OF_PROJECT,
    PROJECT_MEMBER as PROJECT_MEMBER,
    EdgeDiff as EdgeDiff,
    EdgeStore as EdgeStore,
)
from project_editor.editor import (
    CommitResult as CommitResult,
    CommitStatus as CommitStatus,
    ProjectEditor as ProjectEditor,
    apply_join_project as apply_join_project,
    apply_leave_project as apply_leave_project,
    apply_one_transaction as apply_one_transaction,
    resolve_commit as resolve_commit,
)
from project_editor.exceptions import (
    ConfigError as ConfigError,
    ConflictError as ConflictError,
    DatabaseError as DatabaseError,
    DuplicateKeyError as DuplicateKeyError,
    EntityNotFoundError as EntityNotFoundError,
    ProjectEditorError as ProjectEditorError,
    PublishError as PublishError,
    StoreError as StoreError,
    UnknownTransactionTypeError as UnknownTransactionTypeError,
    UsageError as UsageError,
    ValidationError as ValidationError,
)
from project_editor.feed import (
    FeedStoryPublisher as FeedStoryPublisher,
    query_stories as query_stories,
)
from project_editor.history import query_transactions as query_transactions
from project_editor.models import (
    STORY_PROJECT as STORY_PROJECT,
    FeedStory as FeedStory,
    Project as Project,
    ProjectStatus as ProjectStatus,
    ProjectTransaction as ProjectTransaction,
    TransactionType as TransactionType,
    User as User,
)
from project_editor.slug import normalize_slug as normalize_slug
from project_editor.store import ProjectStore as ProjectStore
from project_editor.transactions import (
    TRANSACTION_HANDLERS as TRANSACTION_HANDLERS,
    TransactionHandler as TransactionHandler,
    register_transaction_handler as register_transaction_handler,
)
from project_editor.validator import validate_name as validate_name
