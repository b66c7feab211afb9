from typing import TypedDict, NotRequired

from taskonaut import Context


class SearchParams(TypedDict):
    query: str
    limit: NotRequired[int]
    offset: NotRequired[int]


class UserData(TypedDict):
    name: str
    email: str
    age: NotRequired[int]


class DbNamespace:
    def migrate(self, c: Context, direction: str = "up"):
        """Run database migrations"""
        print(f"Migrating database: {direction}")

    def seed(self, c: Context):
        """Seed the database"""
        print("Seeding database...")

    def _helper(self, c: Context):
        """Private helper, never callable"""
        print("This should not be callable")


class InternalNamespace:
    def secret(self, c: Context):
        """Secret internal task"""
        print("Secret!")


class Tasks:
    """
    Example tasks for the taskonaut CLI
    """

    db = DbNamespace()
    _internal = InternalNamespace()

    async def hello(self, c: Context, name: str, count: int):
        """
        Say hello with a name and repeat count
        @flag name -n
        @flag count -c
        """
        for index in range(count):
            print(f"Hello, {name}! ({index + 1}/{count})")

    def greet(self, c: Context, name: str, enthusiasm: int = 1):
        """Greet someone with optional enthusiasm"""
        print(f"Greetings, {name}{"!" * enthusiasm}")

    def search(self, c: Context, entity: str, params: SearchParams):
        """Search with JSON parameters"""
        print(f"Searching {entity}:")
        print(f'  query: "{params["query"]}"')
        print(f"  limit: {params.get("limit", 10)}")
        print(f"  offset: {params.get("offset", 0)}")

    def create_user(self, c: Context, data: UserData):
        """
        Create a user from JSON data
        @flag data -d --user
        """
        print("Creating user:")
        print(f"  name: {data["name"]}")
        print(f"  email: {data["email"]}")
        if "age" in data:
            print(f"  age: {data["age"]}")

    def batch(self, c: Context, items: list[str]):
        """Process multiple items"""
        print(f"Processing {len(items)} items:")
        for item in items:
            print(f"  - {item}")

    def install(self, c: Context, *packages: str):
        """Install packages (rest params)"""
        print(f"Installing {len(packages)} packages:")
        for package in packages:
            print(f"  - {package}")

    def build(self, c: Context, target: str = "all", *, dry_run: bool = False):
        """
        Build a target through the shell
        @flag dry_run -n --dry-run
        """
        command = f"echo building {target}"
        if dry_run:
            print(f"$ {command}")
            return
        c.run(command, echo=True)
