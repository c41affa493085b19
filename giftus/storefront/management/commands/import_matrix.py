from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from storefront.services.matrix_import import LAYOUTS, MatrixImportError, import_matrix_workbook


class Command(BaseCommand):
    help = 'Импортирует прайс в матричном формате (.xlsx) в каталог'

    def add_arguments(self, parser):
        parser.add_argument('path', help='Путь к .xlsx файлу')
        parser.add_argument('--category', default='', help='Существующая категория для всех товаров файла')
        parser.add_argument(
            '--layout',
            default='stacked',
            choices=sorted(LAYOUTS),
            help='Раскладка прайса (stacked: 3 строки на товар, inline: 4 строки)',
        )

    def handle(self, *args, **options):
        path = Path(options['path'])
        if not path.exists():
            raise CommandError(f'Файл не найден: {path}')

        with path.open('rb') as workbook_file:
            try:
                summary = import_matrix_workbook(
                    workbook_file,
                    category_name=options['category'] or None,
                    layout=options['layout'],
                )
            except MatrixImportError as exc:
                raise CommandError(str(exc)) from exc

        self.stdout.write(
            f'Всего: {summary.total_rows}, успешно: {summary.successful_rows}, '
            f'ошибок: {summary.failed_rows} '
            f'(создано {summary.created_products}, обновлено {summary.updated_products})'
        )
        for error in summary.errors:
            self.stdout.write(self.style.WARNING(error))

        if summary.failed_rows:
            self.stdout.write(self.style.WARNING('Импорт завершён с ошибками'))
        else:
            self.stdout.write(self.style.SUCCESS('Импорт успешно завершён'))
