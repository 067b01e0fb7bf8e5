#!python3
"""
Closed catalogue of event kinds and line roles.

Kinds are grouped into:
- ring buffer sections: ``<Title> (N events):`` followed by ``Event: <ts> ...`` rows
- other sections: a header line followed by body rows and an optional footer
- standalone facts: single self-contained lines
- throwaway noise: recognised but diagnostically inert lines
- REPORT_ABORTED and UNKNOWN
"""

from enum import Enum


class Role(Enum):
    """Position of a line within its kind."""
    HEADER = "header"
    BODY = "body"
    FOOTER = "footer"
    STANDALONE = "standalone"
    THROWAWAY = "throwaway"
    UNKNOWN = "unknown"


class EventKind(Enum):
    # ---- Ring buffer sections ----
    CLASSES_LOADED = "classes_loaded"
    CLASSES_REDEFINED = "classes_redefined"
    CLASSES_UNLOADED = "classes_unloaded"
    COMPILATION_EVENTS = "compilation_events"
    DEOPTIMIZATION_EVENTS = "deoptimization_events"
    DLL_OPERATION_EVENTS = "dll_operation_events"
    EVENTS = "events"
    GC_HEAP_HISTORY = "gc_heap_history"
    INTERNAL_EXCEPTIONS = "internal_exceptions"
    MEMORY_PROTECTIONS = "memory_protections"
    NMETHOD_FLUSHES = "nmethod_flushes"
    VM_OPERATIONS = "vm_operations"
    ZGC_PHASE_SWITCH = "zgc_phase_switch"

    # ---- Other sections ----
    ACTIVE_LOCALE = "active_locale"
    CLASS_INFO = "class_info"
    CODE_CACHE = "code_cache"
    COMPILED_METHOD = "compiled_method"
    CONTAINER_INFO = "container_info"
    CPU_INFO = "cpu_info"
    CURRENT_COMPILE_TASK = "current_compile_task"
    DYNAMIC_LIBRARIES = "dynamic_libraries"
    ENVIRONMENT_VARIABLES = "environment_variables"
    EXCEPTION_COUNTS = "exception_counts"
    GC_PRECIOUS_LOG = "gc_precious_log"
    GLOBAL_FLAGS = "global_flags"
    HEAP = "heap"
    HEAP_REGIONS = "heap_regions"
    INSTRUCTIONS = "instructions"
    INTERNAL_STATISTICS = "internal_statistics"
    LD_PRELOAD_FILE = "ld_preload_file"
    LOCK_STACK = "lock_stack"
    LOGGING = "logging"
    MACH_CODE = "mach_code"
    MARKING_BITS = "marking_bits"
    MAX_MAP_COUNT = "max_map_count"
    MEMINFO = "meminfo"
    MEMORY = "memory"
    METASPACE = "metaspace"
    NATIVE_MEMORY_TRACKING = "native_memory_tracking"
    OS = "os"
    PID_MAX = "pid_max"
    PROCESS_MEMORY = "process_memory"
    REGISTERS = "registers"
    REGISTER_TO_MEMORY_MAPPING = "register_to_memory_mapping"
    RELEASE_FILE = "release_file"
    SIGNAL_HANDLERS = "signal_handlers"
    STACK = "stack"
    STACK_SLOT_TO_MEMORY_MAPPING = "stack_slot_to_memory_mapping"
    THREADS = "threads"
    THREADS_ACTIVE_COMPILE = "threads_active_compile"
    THREADS_CLASS_SMR_INFO = "threads_class_smr_info"
    THREADS_MAX = "threads_max"
    TOP_OF_STACK = "top_of_stack"
    TRANSPARENT_HUGEPAGE = "transparent_hugepage"
    UNAME = "uname"
    VIRTUALIZATION_INFO = "virtualization_info"
    VM_ARGUMENTS = "vm_arguments"
    VM_MUTEX = "vm_mutex"
    ZGC_GLOBALS = "zgc_globals"
    ZGC_METADATA_BITS = "zgc_metadata_bits"
    ZGC_PAGE_TABLE = "zgc_page_table"

    # ---- Standalone facts ----
    HEADER = "header"
    HEADING = "heading"
    BARRIER_SET = "barrier_set"
    CARD_TABLE = "card_table"
    CDS_ARCHIVE = "cds_archive"
    COMMAND_LINE = "command_line"
    CURRENT_THREAD = "current_thread"
    DECODING_CODE_BLOB = "decoding_code_blob"
    ELAPSED_TIME = "elapsed_time"
    HEAP_ADDRESS = "heap_address"
    HOST = "host"
    JVMTI_AGENTS = "jvmti_agents"
    LIBC = "libc"
    LOAD_AVERAGE = "load_average"
    NATIVE_DECODER_STATE = "native_decoder_state"
    OS_UPTIME = "os_uptime"
    PID = "pid"
    POLLING_PAGE = "polling_page"
    RLIMIT = "rlimit"
    SIGINFO = "siginfo"
    TIME = "time"
    TIME_ELAPSED_TIME = "time_elapsed_time"
    TIMEOUT = "timeout"
    TIMEZONE = "timezone"
    VM_INFO = "vm_info"
    VM_OPERATION = "vm_operation"
    VM_STATE = "vm_state"

    # ---- Throwaway ----
    BLANK_LINE = "blank_line"
    END = "end"
    END_BRACE = "end_brace"
    NUMBER = "number"

    # ---- Special ----
    REPORT_ABORTED = "report_aborted"
    UNKNOWN = "unknown"


RING_BUFFER_KINDS = frozenset({
    EventKind.CLASSES_LOADED,
    EventKind.CLASSES_REDEFINED,
    EventKind.CLASSES_UNLOADED,
    EventKind.COMPILATION_EVENTS,
    EventKind.DEOPTIMIZATION_EVENTS,
    EventKind.DLL_OPERATION_EVENTS,
    EventKind.EVENTS,
    EventKind.GC_HEAP_HISTORY,
    EventKind.INTERNAL_EXCEPTIONS,
    EventKind.MEMORY_PROTECTIONS,
    EventKind.NMETHOD_FLUSHES,
    EventKind.VM_OPERATIONS,
    EventKind.ZGC_PHASE_SWITCH,
})

THROWAWAY_KINDS = frozenset({
    EventKind.BLANK_LINE,
    EventKind.END,
    EventKind.END_BRACE,
    EventKind.NUMBER,
})

SPECIAL_KINDS = frozenset({EventKind.REPORT_ABORTED, EventKind.UNKNOWN})
