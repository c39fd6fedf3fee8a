from ..checks import Check, CheckKind
from ..checks.code_quality import (
    find_naming_issues,
    is_source_file,
    make_comment_check,
    make_complexity_check,
    make_duplication_check,
    make_file_size_check,
)
from ..file_walker import CODE_EXTENSIONS, CONFIG_EXTENSIONS
from .base import FileValidator


class CodeQualityValidator(FileValidator):
    name = "code-quality"
    title = "Code Quality"
    tier = 1
    description = "Checks file size, function complexity, duplication, naming and comment quality"
    extensions = CODE_EXTENSIONS | CONFIG_EXTENSIONS | frozenset({".md"})

    def build_checks(self) -> list[Check]:
        limits = self.config.code_quality
        return [
            Check(
                name="File Size",
                detect=make_file_size_check(limits),
                kind=CheckKind.GRADED,
                recommendation="Split large files into smaller, focused modules",
                passed_message="File size within limits",
                issue_message="File too large: {items}",
            ),
            Check(
                name="Function Complexity",
                detect=make_complexity_check(limits),
                kind=CheckKind.GRADED,
                recommendation="Break complex functions into smaller helpers",
                passed_message="All functions have acceptable complexity",
                issue_message="Found {count} complex function(s)",
                applies=is_source_file,
            ),
            Check(
                name="Code Duplication",
                detect=make_duplication_check(limits),
                recommendation="Extract repeated code into shared functions",
                passed_message="No duplicated blocks",
                issue_message="Found {count} duplicated block(s)",
                applies=is_source_file,
            ),
            Check(
                name="Naming Conventions",
                detect=find_naming_issues,
                recommendation="Use descriptive names that follow the language's naming conventions",
                passed_message="Names follow conventions",
                issue_message="Found {count} naming issue(s)",
                applies=is_source_file,
            ),
            Check(
                name="Comment Quality",
                detect=make_comment_check(limits),
                recommendation="Document public functions with doc comments",
                passed_message="Functions are documented",
                issue_message="{count} function(s) lack documentation",
                applies=is_source_file,
            ),
        ]
